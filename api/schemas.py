from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    max_results: int = Field(30, ge=1, le=100)


class FileRequest(BaseModel):
    path: str = Field(..., min_length=1)
    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1, le=1000)


class FileInfoRequest(BaseModel):
    path: str = Field(..., min_length=1)
