from pydantic import BaseModel


class IngestionResult(BaseModel):
    system_name: str
    repository_url: str
    components_added: int = 0
    components_updated: int = 0
    relationships_created: int = 0

    @property
    def components_touched(self) -> int:
        return self.components_added + self.components_updated
