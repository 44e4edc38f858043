from dataclasses import dataclass
from typing import Optional


@dataclass
class PairingSession:
    """State of the WhatsApp session for the lifetime of the process."""

    qr_code: Optional[str] = None  # Latest pairing token issued by the bridge
    ready: bool = False

    def issue(self, qr_code: str) -> None:
        self.qr_code = qr_code
        self.ready = False

    def mark_ready(self) -> None:
        self.ready = True
