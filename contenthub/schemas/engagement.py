from pydantic import BaseModel


class ClassEngagementResult(BaseModel):
    class_id: int
    active: bool
    count: int


class GalleryEngagementResult(BaseModel):
    gallery_id: int
    active: bool
    count: int
