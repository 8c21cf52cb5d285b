"""Back-office client for inventory, trading documents and vouchers."""

__version__ = "0.1.0"
