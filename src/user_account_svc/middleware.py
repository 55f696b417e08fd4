from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers

BODY_TOO_LARGE = "Request body too large"


class BodySizeLimitMiddleware:
    """
    ASGI middleware capping the size of request bodies.

    Requests announcing a larger `Content-Length` are answered 413 straight away.
    Bodies without one (chunked uploads) are counted as they are received; the
    handler reading the body gets an HTTPException(413) once the cap is crossed.
    """

    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            response = JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"message": BODY_TOO_LARGE},
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=BODY_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
