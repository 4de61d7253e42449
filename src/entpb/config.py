from pydantic import BaseModel, ConfigDict, Field

# Maximum number of entries a List call returns, whatever page size is requested.
MAX_PAGE_SIZE = 1000
# Maximum number of requests a single BatchCreate call accepts.
MAX_BATCH_CREATE_SIZE = 1000


class GeneratorSettings(BaseModel):
    """Limits documented on the generated service methods.

    The limits are enforced by the serving layer; descriptors only carry them as method descriptions.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)
    max_batch_create_size: int = Field(default=MAX_BATCH_CREATE_SIZE, ge=1)
