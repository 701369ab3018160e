from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class GeocodeResult:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    success: bool = False
    error: Optional[str] = None
    cached: bool = False
    provider: Optional[str] = None

    @classmethod
    def ok(
        cls,
        provider: str,
        latitude: float,
        longitude: float,
        formatted_address: Optional[str] = None,
    ) -> "GeocodeResult":
        return cls(
            latitude=float(latitude),
            longitude=float(longitude),
            formatted_address=formatted_address,
            success=True,
            provider=provider,
        )

    @classmethod
    def failure(cls, error: str, provider: Optional[str] = None) -> "GeocodeResult":
        return cls(success=False, error=error, provider=provider)

    @classmethod
    def from_dict(cls, data: dict) -> "GeocodeResult":
        fields = cls.__dataclass_fields__
        return cls(**{k: v for k, v in data.items() if k in fields})

    def to_dict(self) -> dict:
        return asdict(self)
