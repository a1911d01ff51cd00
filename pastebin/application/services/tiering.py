"""Tiering policy: which store holds the bytes of a write."""

from pastebin.domain.enums import PasteLocation


class TieringPolicy:
    """Size-threshold tiering with a one-way move to the large-object store.

    A paste in the large-object store never moves back, even when updated
    with small content; otherwise its large object could be left behind with
    no metadata pointing at it.
    """

    def __init__(self, threshold_bytes: int) -> None:
        self.threshold_bytes = threshold_bytes

    def choose_location(
        self,
        size_bytes: int,
        *,
        current: PasteLocation | None = None,
        is_multipart: bool = False,
    ) -> PasteLocation:
        """Target location for a write.

        Args:
            size_bytes: Length of the new content.
            current: Location of the existing paste (updates only).
            is_multipart: The write completes a multipart upload.
        """
        if current is PasteLocation.LARGE_STORE:
            return PasteLocation.LARGE_STORE
        if is_multipart or size_bytes > self.threshold_bytes:
            return PasteLocation.LARGE_STORE
        return PasteLocation.SMALL_STORE
