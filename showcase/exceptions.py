from typing import Dict, List

from fastapi import HTTPException, status


class AuthorizationError(HTTPException):
    """Exception raised when caller is not an admin"""

    def __init__(self, detail: str = "Admin access required"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class AuthenticationRequired(HTTPException):
    """Exception raised when authentication is required"""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ProjectNotFound(HTTPException):
    """Exception raised when project is not found"""

    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project '{project_id}' not found"
        )


class ProjectValidationError(HTTPException):
    """Exception raised when project input fails validation"""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid project data"
        )

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]


class LikeConflict(HTTPException):
    """Exception raised when a like membership already exists"""

    def __init__(self, project_id: int, account_id: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Account '{account_id}' already likes project '{project_id}'"
        )


class StoreUnavailable(HTTPException):
    """Exception raised when the database cannot serve the request"""

    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail
        )


class UploadRejected(HTTPException):
    """Exception raised when an uploaded file is refused"""

    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class OAuthError(Exception):
    """Raised when the OAuth handshake with the provider fails"""


class AccountConflict(HTTPException):
    """Exception raised when a login profile clashes with another account"""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Email of account '{account_id}' is already used by another account"
        )
