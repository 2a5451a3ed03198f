"""
CSV import schemas.

WHAT: Request and response models of the bulk import endpoints.
"""

from typing import List

from pydantic import BaseModel, Field


class CsvImportRequest(BaseModel):
    """CSV document sent as JSON instead of a file upload."""

    csv_text: str = Field(..., description="Whole CSV document including the header row")

    class Config:
        json_schema_extra = {
            "example": {
                "csv_text": "name,email,company\nAda Lovelace,ada@example.com,Engines Ltd\n",
            }
        }


class ImportResultResponse(BaseModel):
    """
    Outcome of an import.

    Every error is prefixed with its spreadsheet row number, e.g.
    "Row 3: Missing required fields (name, email)". A structural problem
    with the file yields a single error and success_count 0.
    """

    success_count: int = Field(..., ge=0, description="Rows imported")
    errors: List[str] = Field(default_factory=list, description="Rejected rows")
