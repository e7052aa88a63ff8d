from pydantic import BaseModel


class ActivationResult(BaseModel):
    market: str
    enable_signature: str
    trade_signature: str
