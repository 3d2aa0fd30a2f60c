from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RouteParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    amount: str  # kept as supplied to preserve precision


class ParseResult(BaseModel):
    success: bool
    data: Optional[RouteParams] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: RouteParams) -> "ParseResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ParseResult":
        return cls(success=False, error=error)


class RouteStep(BaseModel):
    """One pool hop as reported by the oracle. Extra oracle fields are kept."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    pool_id: Optional[str] = Field(default=None, alias="poolId")
    pool_address: Optional[str] = Field(default=None, alias="poolAddress")
    input_coin_address: str = Field(alias="inputCoinAddress")
    output_coin_address: str = Field(alias="outputCoinAddress")


class BestRoute(BaseModel):
    route: List[RouteStep]
    output: str


class PopulatedTx(BaseModel):
    model_config = ConfigDict(extra="ignore")

    to: Optional[str] = None
    data: Optional[str] = None


class RouteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    from_symbol: str
    to: str
    to_symbol: str
    amount: str
    output: str
    route: List[RouteStep]
    route_symbols: Dict[str, str]
    router_address: str
    calldata: str
    approval_target: Optional[str] = None
    approval_calldata: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        """Wire shape: oracle field names for steps, approval fields only when set"""
        # Steps keep exactly the fields the oracle sent, nulls included
        body = self.model_dump(by_alias=True, exclude_unset=True)
        for key in ("approval_target", "approval_calldata"):
            if body.get(key) is None:
                body.pop(key, None)
        return body
