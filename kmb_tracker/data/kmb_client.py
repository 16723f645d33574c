"""KMB open-data API client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from kmb_tracker.data.models import ArrivalRecord, Stop
from kmb_tracker.exceptions import NetworkError

logger = logging.getLogger(__name__)

STOP_LIST_API = "https://data.etabus.gov.hk/v1/transport/kmb/stop"
ETA_API_BASE = "https://data.etabus.gov.hk/v1/transport/kmb/stop-eta"


class KMBClient:
    """Thin wrapper around the KMB stop and stop-eta endpoints using requests."""

    def __init__(
        self,
        stop_list_url: str = STOP_LIST_API,
        eta_url_base: str = ETA_API_BASE,
        timeout_seconds: float = 10,
    ) -> None:
        self._stop_list_url = stop_list_url
        self._eta_url_base = eta_url_base.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def fetch_stop_list(self) -> list[Stop]:
        """Fetch every stop in the directory."""
        response_json = self._get(self._stop_list_url)
        stops: list[Stop] = []
        for item in response_json.get("data") or []:
            if not isinstance(item, dict) or not item.get("stop"):
                logger.warning("Skipping malformed stop entry: %r", item)
                continue
            stops.append(Stop.from_api(item))
        logger.info("Loaded %d stops", len(stops))
        return stops

    def fetch_arrivals(self, stop_id: str) -> list[ArrivalRecord]:
        """Fetch raw arrival predictions for a stop; no data means no arrivals."""
        url = f"{self._eta_url_base}/{quote(stop_id, safe='')}"
        response_json = self._get(url)
        arrivals: list[ArrivalRecord] = []
        for item in response_json.get("data") or []:
            if not isinstance(item, dict):
                logger.warning("Skipping malformed arrival entry: %r", item)
                continue
            arrivals.append(ArrivalRecord.from_api(item))
        return arrivals

    def _get(self, url: str) -> dict[str, Any]:
        try:
            response = requests.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            logger.error("KMB API request to %s failed: %s", url, exc)
            raise NetworkError(f"KMB API request failed: {exc}") from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            logger.error("KMB API request to %s failed: %s", url, detail)
            raise NetworkError(f"KMB API request failed: {detail}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise NetworkError("KMB API response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise NetworkError("KMB API response was not a JSON object")
        return payload


__all__ = ["ETA_API_BASE", "KMBClient", "STOP_LIST_API"]
