"""Response models for the docSet store's GraphQL queries."""

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class IdParts(_Wire):
    type: str | None = None


class DocumentEntry(_Wire):
    id: str
    id_parts: IdParts = Field(default_factory=IdParts, alias="idParts")

    @property
    def is_book(self) -> bool:
        return self.id_parts.type == "book"


class DocSet(_Wire):
    documents: list[DocumentEntry] = Field(default_factory=list)


class BooksData(_Wire):
    doc_set: DocSet = Field(alias="docSet")


class BooksResponse(_Wire):
    """Result of the book discovery query."""

    data: BooksData


class BlockToken(_Wire):
    scopes: list[str] = Field(default_factory=list)
    payload: str = ""


class Block(_Wire):
    tokens: list[BlockToken] = Field(default_factory=list)


class MainSequence(_Wire):
    blocks: list[Block] = Field(default_factory=list)


class BookDocument(_Wire):
    book_code: str | None = Field(default=None, alias="bookCode")
    main_sequence: MainSequence = Field(default_factory=MainSequence, alias="mainSequence")

    def tokens(self) -> list[BlockToken]:
        return [token for block in self.main_sequence.blocks for token in block.tokens]


class BlocksData(_Wire):
    document: BookDocument


class BlocksResponse(_Wire):
    """Result of the per-book block query."""

    data: BlocksData
