"""
Base schemas for operation options.

Provides the shared base class for every per-operation options record.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BaseOptions(BaseModel):
    """
    Base class for all operation option models.

    Option records are flat sets of named numeric/boolean fields. They carry
    no range constraints; range policy (reject or clamp) belongs to the
    operation, which reports it through a Status.
    """

    model_config = ConfigDict(extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        """
        Export options to a plain dictionary.

        Returns:
            Dictionary of the option fields, None values omitted

        Example:
            >>> ResizeOptions(width=800).to_dict()
            {'width': 800, 'maintain_aspect': True}
        """
        return self.model_dump(exclude_none=True)
