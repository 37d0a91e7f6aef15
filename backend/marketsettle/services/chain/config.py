from pydantic import BaseModel


class ChainConfig(BaseModel):
    """Configuration for the market contract client."""

    rpc_url: str
    chain_id: int
    request_timeout_seconds: float = 30.0
    receipt_poll_seconds: float = 2.0
