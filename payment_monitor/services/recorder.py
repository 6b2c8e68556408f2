"""
Recorder component.

Appends one row per payment failure to the "Failed Payments" Airtable table.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from payment_monitor.config import Settings
from payment_monitor.models.payment import FailureRecord, TableRow
from payment_monitor.services.errors import RecorderError
from payment_monitor.utils.logging import get_logger
from payment_monitor.utils.metrics import track_api_call

logger = get_logger(__name__, service="airtable")


class AirtableRecorder:
    """Writes failure records to an Airtable table over its REST API."""
    
    def __init__(
        self,
        api_key: str,
        base_id: str,
        table_name: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the recorder.
        
        Args:
            api_key: Airtable personal access token
            base_id: Base identifier (``app...``)
            table_name: Table name inside the base
            api_url: Airtable REST API root
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self._api_key = api_key
        self._base_id = base_id
        self._table_name = table_name
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "AirtableRecorder":
        return cls(
            api_key=settings.airtable_api_key,
            base_id=settings.airtable_base_id,
            table_name=settings.airtable_table_name,
            api_url=settings.airtable_api_url,
            timeout=settings.http_timeout,
        )
    
    @property
    def table_url(self) -> str:
        return f"{self._api_url}/{self._base_id}/{quote(self._table_name, safe='')}"
    
    async def record(self, record: FailureRecord) -> TableRow:
        """
        Append a row describing the failure.
        
        Args:
            record: Normalized failure record
            
        Returns:
            The row that was submitted
            
        Raises:
            RecorderError: On transport errors or a non-2xx response
        """
        row = TableRow.from_record(record)
        body = {"records": [{"fields": row.to_fields()}]}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        
        try:
            async with track_api_call(logger, "airtable", self.table_url, "POST") as call:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.post(self.table_url, json=body, headers=headers)
                call["status_code"] = response.status_code
                if response.is_error:
                    raise RecorderError(
                        f"Airtable request failed with status code {response.status_code}: "
                        f"{response.text[:200]}"
                    )
        except RecorderError as e:
            logger.error(f"Error adding to Airtable: {e}", extra={"payment_id": record.id})
            raise
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            logger.error(f"Error adding to Airtable: {message}", extra={"payment_id": record.id})
            raise RecorderError(message) from e
        
        logger.info(f"Added failed payment to Airtable: {record.id}", extra={"payment_id": record.id})
        return row
