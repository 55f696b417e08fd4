import logging
from typing import List, Optional

from beanie import PydanticObjectId, init_beanie
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError

from user_account_svc.exceptions import DuplicateEmailError
from user_account_svc.models.user import User


class UserStore:
    """
    MongoDB-backed collection of `User` documents.

    Wraps a single motor client for the whole process. `initialize` registers the
    `User` model with beanie (which builds the unique email index) and must run
    before any other call; the FastAPI lifespan takes care of that.

    Args:
        db_uri (str): MongoDB connection URI. Ignored when `client` is given.
        db_name (str): Name of the database holding the `users` collection.
        client: An already constructed motor-compatible client. The store does
            not close clients it did not create.
    """

    def __init__(self, db_uri: str, db_name: str, client=None):
        self._owns_client = client is None
        self.client = client if client is not None else AsyncIOMotorClient(db_uri)
        self.db_name = db_name
        self._is_initialized = False

    async def initialize(self):
        if not self._is_initialized:
            await init_beanie(database=self.client[self.db_name], document_models=[User])
            self._is_initialized = True
            logging.info("Database connected: %s", self.db_name)

    def close(self):
        if self._owns_client:
            self.client.close()

    async def create(self, name: str, email: str, password_digest: str) -> User:
        """
        Insert a new user with an empty profile and description.

        Raises:
            DuplicateEmailError: If a user with this email already exists.
        """
        user = User(name=name, email=email, password=password_digest, profile="", description="")
        try:
            return await user.insert()
        except DuplicateKeyError as e:
            raise DuplicateEmailError(email) from e

    async def find_by_email(self, email: str) -> Optional[User]:
        return await User.find_one({"email": email})

    async def find_by_id(self, user_id: str) -> Optional[User]:
        # Ids that are not ObjectIds can never match a stored user.
        if not ObjectId.is_valid(user_id):
            return None
        return await User.get(PydanticObjectId(user_id))

    async def save(self, user: User) -> User:
        return await user.save()

    async def all(self) -> List[User]:
        return await User.find_all().to_list()
