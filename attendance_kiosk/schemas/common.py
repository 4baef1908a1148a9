"""
Common Response Schemas
"""
from atams.schemas import DataResponse, PaginationResponse

__all__ = ["DataResponse", "PaginationResponse"]
