# backend/errors.py
from typing import Optional

import requests
from fastapi import Request
from fastapi.responses import JSONResponse


class LanzaBullsError(Exception):
    """Base error; `message` is what the client sees."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(LanzaBullsError):
    status_code = 500


class ClientInputError(LanzaBullsError):
    status_code = 400


class UpstreamFailure(LanzaBullsError):
    """
    An upstream call failed (transport, status or body parse).
    `source` names the upstream resource and `cause` holds the original error;
    neither is sent to the client.
    """
    status_code = 500

    def __init__(self, message: str, source: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message)
        self.source = source
        self.cause = cause

    @property
    def detail(self) -> str:
        """
        Server-side description of the failure.

        requests errors embed the full URL, query string and apikey included, so
        only their class name is kept.
        """
        if self.cause is None:
            return self.message
        if isinstance(self.cause, requests.RequestException):
            return f"{self.message} ({type(self.cause).__name__})"
        return f"{self.message} ({type(self.cause).__name__}: {self.cause})"


async def lanza_bulls_error_handler(request: Request, exc: LanzaBullsError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
