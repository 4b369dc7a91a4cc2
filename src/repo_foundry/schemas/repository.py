"""Schemas for repository creation."""

from pydantic import BaseModel, Field


class RepositoryInput(BaseModel):
    """Request to create a repository."""

    name: str = Field(..., min_length=1, description="Repository name")
    description: str = Field("", description="Repository description")
    private: bool = Field(False, description="Create as private repository")
    template: str | None = Field(None, description="Template repository (owner/name)")
    organization: str | None = Field(None, description="Owning organization")
    auto_init: bool = Field(True, description="Create an initial commit")
    gitignore_template: str | None = None
    license_template: str | None = None
    default_branch: str | None = Field(None, description="Default branch after creation")


class RepositoryResult(BaseModel):
    """Created repository."""

    id: int
    full_name: str
    html_url: str
    default_branch: str | None = None

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @property
    def name(self) -> str:
        return self.full_name.split("/", 1)[1]
