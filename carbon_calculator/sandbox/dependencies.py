"""
FastAPI dependencies for the sandbox.

verify_request_signature runs on every API route. It reads the bearer
token and the raw body, and rejects the request with 401 unless the
token is valid for the configured consumer and was signed over exactly
this body.
"""

from fastapi import Request

from carbon_calculator.sandbox.exceptions import UnauthorizedRequestError
from carbon_calculator.security import RequestSignatureError, verify_request_token


async def verify_request_signature(request: Request) -> str:
    """
    Returns:
        The consumer key from the verified token.

    Raises:
        UnauthorizedRequestError: Missing, malformed, expired or mismatched token.
    """
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedRequestError("Missing bearer token")

    # Starlette caches the body, so the route can still parse it afterwards
    body = await request.body()
    try:
        claims = verify_request_token(token, body)
    except RequestSignatureError as exc:
        raise UnauthorizedRequestError(str(exc)) from exc
    return claims["sub"]
