from app.schemas.base import CamelModel


class UploadRead(CamelModel):
    id: str
    title: str
    image_url: str
    order: int


class UploadListResponse(CamelModel):
    message: str
    uploads: list[UploadRead]


class UploadResponse(CamelModel):
    message: str
    upload: UploadRead


class RearrangeRequest(CamelModel):
    order: list[str]
