from beanie import Document, Indexed


class User(Document):
    """
    Beanie document representing a user account.
    Attributes:
        id (PydanticObjectId): Identifier assigned by MongoDB on insert.
        name (str): Display name.
        email (str): User's unique email address.
        password (str): bcrypt digest of the user's password.
        profile (str): Profile picture encoded as base64 text.
        description (str): Free-form description of the user.
    """
    name: str
    email: Indexed(str, unique=True)
    password: str
    profile: str = ""
    description: str = ""

    class Settings:
        name = "users"
