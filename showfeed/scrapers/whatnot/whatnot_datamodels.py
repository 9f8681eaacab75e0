from typing import Optional, Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Listing-page candidate ---

class ShowCandidate(BaseModel):
    """A shallow record read off a listing card, before the detail page is visited."""
    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Best-effort card text; may be empty.")
    url: str = Field(..., min_length=1, description="Absolute address of the show's detail page.")
    start_raw: Optional[str] = Field(None, description="Unparsed timestamp-like string found on the card.")
    host: str = Field("", description="Seller display name; may be empty.")
    thumbnail: Optional[str] = Field(None, description="Image URL found on the card.")

    @field_validator('title', 'host', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


# --- Published record ---

class ShowRecord(BaseModel):
    """
    One show in the published feed.

    ``host`` is None in seller-page mode, where the feed is a single account
    and the seller is not tracked; ``to_feed_dict`` leaves it out then.
    ``start`` is epoch milliseconds, or None when no schedule time parsed.
    """
    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = Field(..., min_length=1)
    host: Optional[str] = None
    thumbnail: str = ""
    start: Optional[int] = None

    @field_validator('title', 'thumbnail', mode='before')
    @classmethod
    def strip_string_fields(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_feed_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"title": self.title, "url": self.url}
        if self.host is not None:
            data["host"] = self.host
        data["thumbnail"] = self.thumbnail
        data["start"] = self.start
        return data
