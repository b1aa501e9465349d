"""
Ledger Client
=============
Thin HTTP client for the Postchain node that keeps the plant's points.

The node's blockchain RID is looked up once from its chain iid and cached for
the lifetime of the client. Every failure (transport, timeout, non-2xx,
malformed payload) surfaces as :class:`RemoteUnavailable`.

Deployment requirement: the device holds no private key. Queries go
straight to the node, but ``water_plant`` is posted as an unsigned
operation (name, args, signer pubkey) to ``/operations/{brid}``. That path
belongs to a signing relay, which signs the transaction for ``signer`` and
forwards it to the node. ``node_url`` must therefore point at the relay, or
at a proxy that serves both the node routes and the relay route. A bare
Postchain node has no such route and rejects every watering attempt; the
device then reports it as ``RemoteUnavailable``.

Usage
-----
::

    client = LedgerClient("http://localhost:7740", signer=address, timeout=10)
    reading = client.get_points(address)
    client.water_plant()
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests
from pydantic import ValidationError

from companion.constants import LEDGER_OPERATION_WATER, LEDGER_QUERY_GET_POINTS
from companion.domain.exceptions import RemoteUnavailable
from companion.schemas.ledger import PlantReading, WaterOperation

logger = logging.getLogger(__name__)


class LedgerClient:
    """
    Query and submit operations against a Postchain node.

    Parameters
    ----------
    node_url:
        Base URL of the node's REST API.
    signer:
        Public key the relay signs watering transactions for.
    blockchain_iid:
        Chain iid used to discover the blockchain RID.
    timeout:
        Per-request timeout in seconds.
    session:
        Optional ``requests.Session`` (tests inject a mock).
    """

    def __init__(
        self,
        node_url: str,
        signer: str,
        blockchain_iid: int = 0,
        timeout: int = 10,
        session: requests.Session | None = None,
    ):
        self.node_url = node_url.rstrip("/")
        self.signer = signer
        self.blockchain_iid = blockchain_iid
        self.timeout = timeout
        self._session = session or requests.Session()
        self._brid: str | None = None
        self._brid_lock = threading.Lock()

    # -- public API ---------------------------------------------------------

    @property
    def blockchain_rid(self) -> str:
        """Resolve the chain RID once and cache it."""
        if self._brid is None:
            with self._brid_lock:
                if self._brid is None:
                    response = self._request("GET", f"/brid/iid_{self.blockchain_iid}")
                    brid = response.text.strip()
                    if not brid:
                        raise RemoteUnavailable("Ledger returned an empty blockchain RID")
                    self._brid = brid
                    logger.info("Ledger chain iid %s resolved to %s", self.blockchain_iid, brid)
        return self._brid

    def get_points(self, address: str) -> PlantReading:
        """Run the ``get_points`` query for ``address``."""
        response = self._request(
            "GET",
            f"/query/{self.blockchain_rid}",
            params={"type": LEDGER_QUERY_GET_POINTS, "addr": address},
        )
        try:
            reading = PlantReading.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteUnavailable(
                "Malformed get_points response", detail={"body": response.text[:200]}
            ) from exc
        logger.debug("Ledger reading: points=%s stage=%s", reading.points, reading.stage)
        return reading

    def water_plant(self) -> None:
        """Submit the ``water_plant`` operation; raises on any failure."""
        operation = WaterOperation(name=LEDGER_OPERATION_WATER, args=[], signer=self.signer)
        self._request("POST", f"/operations/{self.blockchain_rid}", json=operation.model_dump())
        logger.info("Ledger accepted %s", LEDGER_OPERATION_WATER)

    def close(self) -> None:
        self._session.close()

    # -- internals ----------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.node_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise RemoteUnavailable(f"Ledger request failed: {method} {path}", detail={"error": str(exc)}) from exc
        return response
