"""Receipt preview modal."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static


class ReceiptModal(ModalScreen[None]):
    """Shows the text bill for a paid (or previewed) order."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("enter", "close", "Close"),
        ("q", "close", "Close"),
    ]

    CSS = """
    ReceiptModal {
        align: center middle;
        background: $background 60%;
    }

    #receipt-dialog {
        width: 40;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
        overflow-y: auto;
    }

    #receipt-status {
        color: #ffb3b3;
        margin-top: 1;
    }
    """

    def __init__(self, receipt_text: str, status: str = "") -> None:
        super().__init__()
        self.receipt_text = receipt_text
        self.status = status

    def compose(self) -> ComposeResult:
        with Container(id="receipt-dialog"):
            yield Static(self.receipt_text, id="receipt-body", markup=False)
            yield Static(self.status, id="receipt-status", markup=False)

    def action_close(self) -> None:
        self.dismiss()
