from pydantic import BaseModel


class ReceiptUploadResponse(BaseModel):
    url: str
    file_name: str
    size: int
    content_type: str
