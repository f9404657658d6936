"""
Shared video request rules.

Validation, prompt enhancement and time estimation are used by both the
proxy endpoint and the studio, so they live here with no I/O.
"""
import random
import re
import string
import time
from typing import Optional

VALID_DURATIONS = (5, 10, 15, 30)
VALID_ASPECT_RATIOS = ("16:9", "9:16", "1:1")
VALID_QUALITIES = ("standard", "high")
MAX_PROMPT_LENGTH = 1000
MAX_DURATION = 30
SUPPORTED_MODELS = ["replicate/google/veo-3"]

DURATION_OPTIONS = [
    {"value": 5, "label": "5 seconds", "description": "Quick preview"},
    {"value": 10, "label": "10 seconds", "description": "Standard"},
    {"value": 15, "label": "15 seconds", "description": "Extended"},
    {"value": 30, "label": "30 seconds", "description": "Long form"},
]

ASPECT_RATIO_OPTIONS = [
    {"value": "16:9", "label": "Landscape (16:9)", "description": "Perfect for YouTube, TV"},
    {"value": "9:16", "label": "Portrait (9:16)", "description": "Great for TikTok, Instagram Stories"},
    {"value": "1:1", "label": "Square (1:1)", "description": "Ideal for Instagram posts"},
]

STYLE_OPTIONS = [
    {"value": "cinematic", "label": "Cinematic", "description": "Film-like quality with dramatic lighting"},
    {"value": "realistic", "label": "Realistic", "description": "Natural, true-to-life appearance"},
    {"value": "animation", "label": "Animation", "description": "3D animated style"},
    {"value": "artistic", "label": "Artistic", "description": "Creative and stylized visuals"},
    {"value": "documentary", "label": "Documentary", "description": "Clean, professional look"},
    {"value": "abstract", "label": "Abstract", "description": "Experimental and creative"},
]

QUALITY_OPTIONS = [
    {"value": "standard", "label": "Standard Quality", "description": "Faster generation"},
    {"value": "high", "label": "High Quality", "description": "Best visual quality, takes longer"},
]

_FORMAT_PHRASES = {
    "16:9": "widescreen format (16:9)",
    "9:16": "portrait format (9:16)",
    "1:1": "square format (1:1)",
}

_MP4_URL_RE = re.compile(r"https?://\S+\.mp4")
_ID_ALPHABET = string.ascii_lowercase + string.digits


class ValidationError(ValueError):
    """Raised when a generation request breaks the submission rules."""


def validate_video_request(prompt: Optional[str], duration, aspect_ratio) -> Optional[str]:
    """
    Check a submission against the allowed values.

    Args:
        prompt: Raw prompt text
        duration: Requested length in seconds
        aspect_ratio: Requested frame shape

    Returns:
        A human readable error message, or None when the request is valid
    """
    if not isinstance(prompt, str) or not prompt.strip():
        return "Prompt is required"

    if len(prompt) > MAX_PROMPT_LENGTH:
        return "Prompt must be less than 1000 characters"

    # exact int only: "10", 10.0 and True are all rejected
    if type(duration) is not int or duration not in VALID_DURATIONS:
        return "Duration must be 5, 10, 15, or 30 seconds"

    if not isinstance(aspect_ratio, str) or aspect_ratio not in VALID_ASPECT_RATIOS:
        return "Invalid aspect ratio"

    return None


def create_enhanced_prompt(prompt: str, duration: int, aspect_ratio: str, style: str, quality: str) -> str:
    """
    Wrap the user prompt with the technical instructions sent to the model.
    """
    enhanced = f"Generate a {duration}-second video"
    enhanced += f" in {_FORMAT_PHRASES.get(aspect_ratio, _FORMAT_PHRASES['1:1'])}"

    if quality == "high":
        enhanced += ", high quality, 4K resolution"

    if style and style != "default":
        enhanced += f", {style.lower()} style"

    enhanced += f": {prompt}"
    enhanced += ". Ensure smooth motion, clear visuals, and professional quality."
    return enhanced


def estimate_processing_time(duration: int, quality: str) -> float:
    """Seconds of processing expected for a clip, never below 30."""
    base_time = duration * 10
    if quality == "high":
        base_time *= 1.5
    return max(base_time, 30)


def _random_suffix(length: int = 9) -> str:
    return "".join(random.choice(_ID_ALPHABET) for _ in range(length))


def generate_task_id() -> str:
    """Opaque id handed back when the provider is still processing."""
    return f"task_{int(time.time() * 1000)}_{_random_suffix()}"


def generate_generation_id() -> str:
    """Client side id for a single generation attempt."""
    return f"gen_{int(time.time() * 1000)}_{_random_suffix()}"


def extract_video_url(content: str) -> Optional[str]:
    """Return the first .mp4 link found in model output, if any."""
    match = _MP4_URL_RE.search(content or "")
    return match.group(0) if match else None


def looks_like_processing(content: str) -> bool:
    return "processing" in content or "generating" in content
