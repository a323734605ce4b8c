from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import quote

import requests

from .config import Config
from .interfaces import ActuatorError, Inventory, PortActuator, StatisticsSource
from .models import PortIdentity, RateSample

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

LOCAL_PORT = "local"


def _seg(value: str) -> str:
    # device ids such as of:0000000000000001 go in the path verbatim, colons escaped
    return quote(str(value), safe="")


# =========================
# ONOS REST Client
# =========================

class OnosClient(Inventory, StatisticsSource, PortActuator):
    def __init__(self, cfg: Config, session: Optional[requests.Session] = None):
        self.base = str(cfg.controller).rstrip("/")
        self.timeout = cfg.request_timeout
        self.verify = cfg.verify_tls
        self.s = session or requests.Session()
        self.s.headers.update(JSON_HEADERS)
        if cfg.token:
            self.s.headers.update({"Authorization": f"Bearer {cfg.token}"})
        else:
            self.s.auth = (cfg.username, cfg.password)

    def _url(self, path: str) -> str:
        return f"{self.base}{path}"

    def _request(self, method: str, path: str, json_body: Optional[Dict] = None) -> requests.Response:
        url = self._url(path)
        resp = self.s.request(method, url, json=json_body, timeout=self.timeout, verify=self.verify)
        if not (200 <= resp.status_code < 300):
            raise requests.HTTPError(f"{method} {url} => {resp.status_code} {resp.text}", response=resp)
        return resp

    # --- Inventory ---

    def list_devices(self) -> List[str]:
        r = self._request("GET", "/onos/v1/devices")
        return [d["id"] for d in r.json().get("devices", []) if d.get("id")]

    def list_ports(self) -> List[PortIdentity]:
        ports: List[PortIdentity] = []
        for device_id in self.list_devices():
            r = self._request("GET", f"/onos/v1/devices/{_seg(device_id)}/ports")
            for p in r.json().get("ports", []):
                number = str(p.get("port", ""))
                if not number or number.lower() == LOCAL_PORT:
                    continue
                ports.append(PortIdentity(device_id, number))
        return ports

    # --- Statistics ---

    def get_statistics(self, port: PortIdentity) -> Optional[RateSample]:
        """
        Returns the port's cumulative counters, or None when the controller
        has none (no entry, 404, or the request timed out).
        """
        path = f"/onos/v1/statistics/ports/{_seg(port.device_id)}/{_seg(port.port_number)}"
        try:
            r = self._request("GET", path)
        except requests.Timeout:
            return None
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

        for dev in r.json().get("statistics", []):
            if dev.get("device") not in (None, port.device_id):
                continue
            for entry in dev.get("ports", []):
                if str(entry.get("port")) != port.port_number:
                    continue
                if "durationSec" not in entry:
                    return None
                return RateSample(
                    bytes_received=int(entry.get("bytesReceived", 0)),
                    bytes_sent=int(entry.get("bytesSent", 0)),
                    duration_seconds=float(entry["durationSec"]),
                )
        return None

    # --- Port state ---

    def set_port_enabled(self, port: PortIdentity, enabled: bool) -> None:
        path = f"/onos/v1/devices/{_seg(port.device_id)}/portstate/{_seg(port.port_number)}"
        try:
            self._request("POST", path, json_body={"enabled": bool(enabled)})
        except requests.RequestException as e:
            raise ActuatorError(str(e)) from e
