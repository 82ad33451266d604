"""
Storage API client for fetching historical measurement records.

The engine uses it as a ``RecordSource`` to backfill a patient's history.
"""
import os
import logging
from typing import Optional

import httpx

from models.record_models import RecordsRequest, RecordsResponse
from vital_alerts.ingest import payload_to_record
from vital_alerts.models import MeasurementRecord

# get storage environment variables
STORAGE_API_BASE_URL = os.getenv("VITAL_ALERTS_STORAGE_BASE_URL")
STORAGE_SESSION_TOKEN = os.getenv("VITAL_ALERTS_STORAGE_TOKEN")

RECORDS_ENDPOINT = "/records/search"


class RecordsClient:
    """
    Client for the record storage service, sync and async.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session_token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
    ):
        self.base_url = (base_url or STORAGE_API_BASE_URL or "").rstrip("/")
        self.session_token = session_token or STORAGE_SESSION_TOKEN
        if not self.base_url:
            raise ValueError("###### [storage] base URL not set (VITAL_ALERTS_STORAGE_BASE_URL)")

        self.headers = {"content-type": "application/json"}
        if self.session_token:
            self.headers["x-session-token"] = self.session_token
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)

    @property
    def records_url(self) -> str:
        return f"{self.base_url}/{RECORDS_ENDPOINT.lstrip('/')}"

    def fetch_records(self, patient_id: int, from_time: int, to_time: int) -> list[MeasurementRecord]:
        """Fetch records with ``from_time <= timestamp <= to_time`` (blocking)."""
        request_data = RecordsRequest(patientId=patient_id, fromTime=from_time, toTime=to_time)
        url = self.records_url
        try:
            with httpx.Client(follow_redirects=True, timeout=self.timeout) as client:
                response = client.post(url, json=request_data.model_dump(), headers=self.headers)
                logging.info(f"Request {url} completed with status: {response.status_code}")
                response.raise_for_status()
                data = response.json() if response.text else {}
        except httpx.TimeoutException as e:
            logging.error(f"Timeout error calling storage API POST {url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logging.error(f"HTTP error calling storage API POST {url}: {e}")
            logging.error(f"Response text: {e.response.text}")
            raise
        except httpx.RequestError as e:
            logging.error(f"Request error calling storage API POST {url}: {e}")
            raise
        return self._parse(data, patient_id)

    async def afetch_records(self, patient_id: int, from_time: int, to_time: int) -> list[MeasurementRecord]:
        """Async variant of :meth:`fetch_records`."""
        request_data = RecordsRequest(patientId=patient_id, fromTime=from_time, toTime=to_time)
        url = self.records_url
        try:
            async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
                response = await client.post(url, json=request_data.model_dump(), headers=self.headers)
                logging.info(f"Request {url} completed with status: {response.status_code}")
                response.raise_for_status()
                data = response.json() if response.text else {}
        except httpx.TimeoutException as e:
            logging.error(f"Timeout error calling storage API POST {url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logging.error(f"HTTP error calling storage API POST {url}: {e}")
            logging.error(f"Response text: {e.response.text}")
            raise
        except httpx.RequestError as e:
            logging.error(f"Request error calling storage API POST {url}: {e}")
            raise
        return self._parse(data, patient_id)

    def _parse(self, data, patient_id: int) -> list[MeasurementRecord]:
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected non-JSON response from {RECORDS_ENDPOINT}: {data!r}")
        code = data.get("code")
        if code not in (0, 200):
            logging.error(f"Record fetch failed: code={code}, endpoint={RECORDS_ENDPOINT}, body={data!r}")
            raise RuntimeError(f"Storage records API error (code={code})")

        response = RecordsResponse(**data)
        records = [payload_to_record(payload) for payload in response.data or []]
        foreign = [record for record in records if record.patient_id != patient_id]
        if foreign:
            # Only the requested patient is merged into history.
            logging.error(f"Storage returned {len(foreign)} records for other patients than {patient_id}")
            records = [record for record in records if record.patient_id == patient_id]
        return sorted(records, key=lambda record: record.timestamp)
