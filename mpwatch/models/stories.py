from pydantic import BaseModel, ConfigDict


class Story(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | int
    title: str
    url: str | None = None
    created_at: str | None = None
    published_date: str | None = None
    ai_summary: str | None = None
    ai_image_url: str | None = None
    source: str | None = None
