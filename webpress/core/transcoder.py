"""
Adaptive WebP transcoder.

Re-encodes a raster image as lossy WebP, searching downwards in quality
for an output that is smaller than the source. The search is a bounded
state machine:

    SEARCHING(quality, attempt) -> FALLBACK -> DONE | FAILED

- Start at quality 50 for WebP sources, 70 for everything else.
- An output below MIN_OUTPUT_SIZE bytes fails the file.
- An output not smaller than the source is discarded and the quality is
  lowered by 20, at most MAX_ATTEMPTS times and never from the floor of 10.
- If the search ends without a smaller output, one final encode at quality
  20 is made and its size is returned whatever it is. The caller decides
  whether that counts as an improvement.
"""
import os
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from PIL import Image, UnidentifiedImageError

from webpress.exceptions import EncodeError, TooSmallOutputError
from webpress.utils.file_handling import safe_remove
from webpress.utils.metrics import PerformanceTimer

# Set up logging
logger = logging.getLogger(__name__)

# Output format constants
TARGET_FORMAT = "WEBP"
TARGET_EXTENSION = ".webp"
TARGET_MEDIA_TYPE = "image/webp"

# Quality search constants
DEFAULT_START_QUALITY = 70
WEBP_START_QUALITY = 50
QUALITY_STEP = 20
QUALITY_FLOOR = 10
MAX_ATTEMPTS = 3
FALLBACK_QUALITY = 20
MIN_OUTPUT_SIZE = 512

# Encoder settings
WEBP_METHOD = 1  # fast effort
WEBP_ALPHA_QUALITY = 80

Encoder = Callable[[Image.Image, str, int], None]


class SearchState(str, Enum):
    """States of the quality search"""
    SEARCHING = "searching"
    FALLBACK = "fallback"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Transition:
    """One step of the quality search: the state entered and what it measured"""
    state: SearchState
    quality: int
    attempt: int
    size: Optional[int] = None


@dataclass
class SearchResult:
    """Final size of a quality search and the path it took to get there"""
    converted_size: int
    quality: int
    encodes: int
    transitions: List[Transition] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return any(t.state is SearchState.FALLBACK for t in self.transitions)


def encode_webp(image: Image.Image, target_path: str, quality: int) -> None:
    """Write ``image`` to ``target_path`` as lossy WebP at ``quality``."""
    image.save(
        target_path,
        format=TARGET_FORMAT,
        quality=quality,
        method=WEBP_METHOD,
        alpha_quality=WEBP_ALPHA_QUALITY
    )


def _has_alpha(image: Image.Image) -> bool:
    if image.mode in ("RGBA", "LA", "PA", "La", "RGBa"):
        return True
    return image.mode == "P" and "transparency" in image.info


def load_image(source_path: str) -> Image.Image:
    """
    Load the first frame of an image in a mode the WebP writer accepts.

    Args:
        source_path: Path to a JPEG, PNG, WebP or GIF file

    Returns:
        An RGB or RGBA image detached from the source file

    Raises:
        EncodeError: If the file cannot be decoded
    """
    try:
        with Image.open(source_path) as img:
            img.seek(0)
            img.load()
            if img.mode in ("RGB", "RGBA"):
                return img.copy()
            return img.convert("RGBA" if _has_alpha(img) else "RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.warning(f"Cannot decode {source_path}: {e}")
        raise EncodeError("Unsupported or corrupt image data") from e
    except (OSError, ValueError, EOFError) as e:
        logger.warning(f"Cannot read {source_path}: {e}")
        raise EncodeError("Failed to read source image") from e


class AdaptiveTranscoder:
    """
    Converts images to WebP with a bounded, decreasing-quality search.

    The encoder is pluggable so that the search can be driven by any
    callable with the signature ``(image, target_path, quality)``.
    """

    def __init__(
        self,
        encoder: Encoder = encode_webp,
        min_output_size: int = MIN_OUTPUT_SIZE,
        max_attempts: int = MAX_ATTEMPTS
    ):
        self.encoder = encoder
        self.min_output_size = min_output_size
        self.max_attempts = max_attempts

    def _encode(self, image: Image.Image, target_path: str, quality: int, attempt: int) -> int:
        """Encode once and return the size of the written file."""
        with PerformanceTimer() as timer:
            try:
                self.encoder(image, target_path, quality)
                size = os.path.getsize(target_path)
            except EncodeError:
                safe_remove(target_path)
                raise
            except (OSError, ValueError, KeyError) as e:
                safe_remove(target_path)
                logger.error(f"Encoding at quality {quality} failed: {e}")
                raise EncodeError(f"WebP encoding failed at quality {quality}") from e

        logger.info(
            f"Attempt {attempt + 1} at quality {quality}: {size} bytes "
            f"in {timer.execution_time:.3f} seconds"
        )
        return size

    def _reject_degenerate(self, target_path: str, size: int, quality: int) -> None:
        if size < self.min_output_size:
            safe_remove(target_path)
            logger.warning(f"Output of {size} bytes at quality {quality} is below {self.min_output_size} bytes")
            raise TooSmallOutputError(size, quality, self.min_output_size)

    def search(
        self,
        image: Image.Image,
        target_path: str,
        original_size: int,
        source_is_webp: bool
    ) -> SearchResult:
        """
        Run the quality search on an already loaded image.

        Args:
            image: Image to encode
            target_path: Where the output is written
            original_size: Size of the source file in bytes
            source_is_webp: Whether the source already is WebP

        Returns:
            SearchResult with the size of the file left at ``target_path``

        Raises:
            TooSmallOutputError: If an encode produced a degenerate output
            EncodeError: If the encoder failed
        """
        quality = WEBP_START_QUALITY if source_is_webp else DEFAULT_START_QUALITY
        attempt = 0
        encodes = 0
        transitions = []

        while True:
            size = self._encode(image, target_path, quality, encodes)
            encodes += 1
            transitions.append(Transition(SearchState.SEARCHING, quality, attempt, size))
            self._reject_degenerate(target_path, size, quality)

            if size >= original_size and quality > QUALITY_FLOOR and attempt < self.max_attempts:
                safe_remove(target_path)
                quality -= QUALITY_STEP
                attempt += 1
                logger.info(f"Size {size} >= {original_size}, retrying with quality {quality}")
                if attempt >= self.max_attempts:
                    break
                continue
            break

        if size >= original_size:
            safe_remove(target_path)
            quality = FALLBACK_QUALITY
            logger.info(f"No reduction after {encodes} attempts, forcing quality {quality}")
            size = self._encode(image, target_path, quality, encodes)
            encodes += 1
            transitions.append(Transition(SearchState.FALLBACK, quality, attempt, size))

        transitions.append(Transition(SearchState.DONE, quality, attempt, size))
        return SearchResult(
            converted_size=size,
            quality=quality,
            encodes=encodes,
            transitions=transitions
        )

    def run(
        self,
        source_path: str,
        target_path: str,
        original_size: int,
        source_is_webp: bool
    ) -> SearchResult:
        """Load ``source_path`` and run the quality search on it."""
        image = load_image(source_path)
        try:
            return self.search(image, target_path, original_size, source_is_webp)
        finally:
            image.close()


def transcode(
    source_path: str,
    target_path: str,
    original_size: int,
    source_is_webp: bool,
    transcoder: Optional[AdaptiveTranscoder] = None
) -> int:
    """
    Convert one file to WebP and return the size of the output.

    The returned size may be greater than or equal to ``original_size`` when
    even the fallback encode did not help; the output is left in place for
    the caller to keep or discard.
    """
    if transcoder is None:
        transcoder = AdaptiveTranscoder()
    return transcoder.run(source_path, target_path, original_size, source_is_webp).converted_size
