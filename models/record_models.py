"""
Measurement record payload models for the ingestion boundary and the storage API.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordPayload(BaseModel):
    """
    Model for a single measurement record as received from upstream.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    patientId: int = Field(description="Patient ID")
    measurementValue: float = Field(allow_inf_nan=False, description="Measured value")
    recordType: str = Field(min_length=1, description="Signal kind, e.g. SystolicBP or ECG")
    timestamp: int = Field(ge=0, description="Measurement time in epoch milliseconds")
    additionalInfo: Optional[str] = Field(default=None, description="Free-text annotation")

    @field_validator("additionalInfo")
    @classmethod
    def _blank_annotation_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class RecordsRequest(BaseModel):
    """
    Request model for the storage records API.
    """
    patientId: int = Field(description="Patient ID")
    fromTime: int = Field(description="Inclusive lower bound, epoch milliseconds")
    toTime: int = Field(description="Inclusive upper bound, epoch milliseconds")


class RecordsResponse(BaseModel):
    """
    Model for the storage records API response body.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    code: Optional[int] = Field(default=None, description="Service status code")
    msg: Optional[str] = Field(default=None, description="Service status message")
    data: Optional[List[RecordPayload]] = Field(default=None, description="Records in the requested range")
