from abc import ABC, abstractmethod

from docgen.services.assembler import AssembledDocument


class DocumentRenderer(ABC):
    """Turns an assembled document into an artifact.

    Canvas and markup renderers differ on purpose where a document has no
    signature yet: the canvas omits the section, the markup draws a blank
    signature line for the customer to sign.
    """

    @abstractmethod
    async def render(self, assembled: AssembledDocument):
        ...
