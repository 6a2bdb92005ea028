# kathakar/__init__.py
import os
import io
import re
import sys
import time
import base64
import argparse
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from PIL import Image

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

# ------------------ ENV & CONFIG ------------------
load_dotenv()

# Models (override via env if your account uses different names)
DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
# widely available image model; preview models tend to 403 on free keys
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_REQUEST_TIMEOUT_MS = 120_000

MAX_IMAGE_COUNT = 30
IMAGE_ASPECT_RATIO = "16:9"


class Settings(BaseModel):
    api_key: str
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    print_prompts: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in .env")
        return cls(
            api_key=api_key,
            text_model=os.getenv("PLANNING_MODEL", DEFAULT_TEXT_MODEL),
            image_model=os.getenv("NANO_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            request_timeout_ms=int(os.getenv(
                "KATHAKAR_REQUEST_TIMEOUT_MS", str(DEFAULT_REQUEST_TIMEOUT_MS))),
            print_prompts=os.getenv("PRINT_PROMPTS", "1") == "1",
        )


# ------------------ PROMPTS -----------------------
PROMPTS_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str) -> str:
    p = PROMPTS_DIR / f"{name}.txt"
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


STORY_IDEA_TEMPLATE = load_prompt("story_idea")
EXPAND_TEXT_TEMPLATE = load_prompt("expand_text")
CHARACTER_PROFILE_TEMPLATE = load_prompt("character_profile")
TRANSLATE_BENGALI_TEMPLATE = load_prompt("translate_bengali")
SCENE_DESCRIPTION_TEMPLATE = load_prompt("scene_description")
IMAGE_TEMPLATE = load_prompt("image")

IDEA_SYSTEM_INSTRUCTION = "You are a creative writing assistant specializing in Bengali literature."

STYLE_PROMPTS = {
    "Cinematic": "Style: Cinematic, high-contrast, moody, dramatic lighting, detailed, depth of field.",
    "Photorealistic": "Style: Photorealistic, realistic textures, ray tracing, hyper-realism.",
    "Anime": "Style: Anime style, vibrant colors, detailed backgrounds, emotional atmosphere.",
    "Watercolor": "Style: Watercolor painting, soft edges, artistic, dreamy, paper texture.",
    "Impressionistic": "Style: Impressionist painting, visible brushstrokes, vibrant colors.",
    "Surrealist": "Style: Surrealism, dream-like imagery, illogical scenes, unexpected juxtapositions.",
    "Bengali Art": "Style: Bengali novel cover art style, artistic, cultural aesthetic.",
    "Digital Art": "Style: Digital art, vibrant, clear, detailed.",
}
FALLBACK_STYLE = "Digital Art"
DEFAULT_STYLE = "Bengali Art"

ADULT_MOOD = "Mood: Mature, serious, sophisticated."
GENERAL_MOOD = "Mood: Inviting, clear, general audience."

# ------------------ DATA MODELS -------------------

GENRES = ["Romance", "Thriller", "Horror", "Drama", "Fantasy",
          "Sci-Fi", "Historical", "Erotica", "Other"]


class Character(BaseModel):
    name: str
    role: str = ""  # Protagonist, Antagonist, etc.
    description: str = ""


class Story(BaseModel):
    title: str
    synopsis: str = ""
    genre: str = "Other"
    is_adult: bool = False
    characters: List[Character] = Field(default_factory=list)


class ImageOptions(BaseModel):
    is_adult: bool = False
    style: str = DEFAULT_STYLE
    count: int = Field(1, ge=1, le=MAX_IMAGE_COUNT)


class RetryPolicy(BaseModel):
    """
    Knobs for the sequential batch loop.

    A text-only ("chatty") reply is retried only while the slot has used at
    most text_retries attempts, so the default retries it once when it is the
    first failure. 0 treats every text reply as a hard refusal.
    """
    max_attempts: int = Field(3, ge=1)
    backoff_base_seconds: float = 2.0
    text_retries: int = Field(1, ge=0)
    text_retry_pause_seconds: float = 1.0
    politeness_delay_seconds: float = 2.0

    def backoff_seconds(self, failures: int) -> float:
        # 2s, 4s, 8s for the 1st, 2nd, 3rd rate-limited failure
        return self.backoff_base_seconds * (2 ** (failures - 1))


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    TEXT_ONLY = "text_only"
    SAFETY_REFUSED = "safety_refused"
    NO_IMAGE_DATA = "no_image_data"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class SlotState(str, Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    ABANDONED = "abandoned"
    SKIPPED = "skipped"


class SlotOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    state: SlotState = SlotState.PENDING
    attempts: int = 0
    image: Optional[str] = None
    failures: Tuple[FailureKind, ...] = ()
    last_error: Optional[str] = None


class BatchReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    slots: Tuple[SlotOutcome, ...] = ()
    cancelled: bool = False

    @property
    def images(self) -> Tuple[str, ...]:
        return tuple(s.image for s in self.slots if s.state == SlotState.SUCCEEDED)

    @property
    def failures(self) -> Tuple[FailureKind, ...]:
        return tuple(k for s in self.slots for k in s.failures)


# ------------------ ERRORS ------------------------


class ImageGenerationError(RuntimeError):
    """A single image attempt failed; kind decides whether it is retried."""

    def __init__(self, kind: FailureKind, message: str, text: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.text = text


class BatchGenerationError(RuntimeError):
    def __init__(self, message: str, report: Optional[BatchReport] = None):
        super().__init__(message)
        self.report = report or BatchReport()

    @property
    def kind(self) -> FailureKind:
        failures = self.report.failures
        return failures[-1] if failures else FailureKind.OTHER


class BatchCancelledError(BatchGenerationError):
    pass


BATCH_FAILED_MESSAGE = "Unable to generate images. The model may be refusing the prompt or the service is busy."
BATCH_CANCELLED_MESSAGE = "Image generation was cancelled before any image was produced."

SAFETY_FINISH_REASONS = {
    "SAFETY", "PROHIBITED_CONTENT", "IMAGE_SAFETY", "IMAGE_PROHIBITED_CONTENT",
    "BLOCKLIST", "SPII",
}


def classify_api_error(e: Exception) -> FailureKind:
    """Map an SDK/transport exception to a failure kind."""
    if isinstance(e, genai_errors.APIError):
        code, status = e.code, (e.status or "")
    else:
        code = getattr(e, "code", None) or getattr(e, "status_code", None)
        status = getattr(e, "status", None)
        status = status if isinstance(status, str) else ""
    if code == 429 or "RESOURCE_EXHAUSTED" in status:
        return FailureKind.RATE_LIMITED
    if code == 403 or "PERMISSION_DENIED" in status:
        return FailureKind.PERMISSION_DENIED
    return FailureKind.OTHER


def describe_generation_error(e: Exception) -> str:
    """Short user-facing message for a failed image request."""
    kind = getattr(e, "kind", FailureKind.OTHER)
    if kind == FailureKind.PERMISSION_DENIED:
        return "Permission denied (403). API key issue."
    if kind == FailureKind.RATE_LIMITED:
        return "Too many requests. Wait a moment."
    if kind in (FailureKind.SAFETY_REFUSED, FailureKind.TEXT_ONLY):
        return "Content blocked by safety filters. Modify prompt."
    if kind == FailureKind.NO_IMAGE_DATA:
        return "No image returned. Try modifying the prompt."
    return "Failed to generate image."

# ------------------ UTILITIES ---------------------


def fill(template: str, **kv):
    """Replace only specific placeholders, leaving JSON braces alone.

    Single pass: placeholder-like text inside a substituted value is kept as is.
    """
    if not kv:
        return template
    pattern = re.compile("|".join(re.escape(f"{{{k}}}") for k in kv))
    return pattern.sub(lambda m: kv[m.group(0)[1:-1]], template)


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def image_bytes_to_pil(b: bytes) -> Image.Image:
    return Image.open(io.BytesIO(b)).convert("RGBA")


def pil_to_png_bytes(img: Image.Image) -> bytes:
    """Converts a PIL Image object to PNG bytes."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_uri(img_bytes: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(img_bytes).decode('utf-8')}"


def data_uri_to_bytes(uri: str) -> bytes:
    header, _, payload = uri.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URI")
    return base64.b64decode(payload)


# --- Simple prompt logger (stdout + file) ---


class PromptLogger:
    def __init__(self, out_file: Optional[Path] = None, echo: bool = True):
        self.out_file = out_file
        self.echo = echo
        self.lines: List[str] = []

    def log(self, title: str, content: str):
        block = f"\n===== {title} =====\n{content.strip()}\n"
        self.lines.append(block)
        if self.echo:
            print(block)

    def flush(self):
        if self.out_file is None:
            return
        self.out_file.write_text("".join(self.lines), encoding="utf-8")

# ------------------ GENAI WRAPPER ----------------


class GAIC:
    def __init__(self, settings: Settings, client=None, logger: Optional[PromptLogger] = None):
        self.settings = settings
        self.logger = logger or PromptLogger(echo=settings.print_prompts)
        self.client = client or genai.Client(
            api_key=settings.api_key,
            http_options=types.HttpOptions(timeout=settings.request_timeout_ms),
        )

    # Text generation (Gemini flash)
    def generate_text(self, prompt: str, temperature: Optional[float] = None,
                      system_instruction: Optional[str] = None) -> str:
        config = None
        if temperature is not None or system_instruction:
            config = types.GenerateContentConfig(
                temperature=temperature,
                system_instruction=system_instruction,
            )
        resp = self.client.models.generate_content(
            model=self.settings.text_model, contents=prompt, config=config)
        if getattr(resp, "text", ""):
            return resp.text
        out = []
        for c in getattr(resp, "candidates", []) or []:
            content = getattr(c, "content", None)
            for p in getattr(content, "parts", None) or []:
                if getattr(p, "text", None):
                    out.append(p.text)
        return "\n".join(out).strip()

    def generate_single_image(self, image_prompt: str) -> str:
        """
        One request to the image model. Returns a PNG data URI.

        Raises ImageGenerationError tagged with the failure kind so the
        batch loop can decide whether to back off, retry once, or give up.
        """
        try:
            resp = self.client.models.generate_content(
                model=self.settings.image_model,
                contents=image_prompt,
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=IMAGE_ASPECT_RATIO),
                ),
            )
        except Exception as e:
            raise ImageGenerationError(classify_api_error(e), str(e)) from e

        feedback = getattr(resp, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        if block_reason:
            raise ImageGenerationError(
                FailureKind.SAFETY_REFUSED, f"Prompt refused by safety filters: {_enum_name(block_reason)}")

        candidates = getattr(resp, "candidates", None) or []
        first = candidates[0] if candidates else None
        content = getattr(first, "content", None)
        parts = getattr(content, "parts", None) or []

        refusal_text = ""
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                data = inline.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                try:
                    test_img = Image.open(io.BytesIO(data))
                    print(f"[DEBUG] Gemini image generated: {test_img.size}, {test_img.format}")
                except Exception as e:
                    print(f"[DEBUG] Gemini image generated ({len(data)} bytes, unreadable by PIL: {e})")
                return to_data_uri(data)
            if getattr(part, "text", None):
                refusal_text += part.text

        finish_reason = _enum_name(getattr(first, "finish_reason", None))
        if finish_reason in SAFETY_FINISH_REASONS:
            raise ImageGenerationError(
                FailureKind.SAFETY_REFUSED, f"Image refused by safety filters: {finish_reason}",
                text=refusal_text or None)

        if refusal_text:
            print(f"[WARN] Gemini image text response: {refusal_text}")
            raise ImageGenerationError(
                FailureKind.TEXT_ONLY,
                f'Model responded with text instead of image: "{refusal_text[:100]}..."',
                text=refusal_text)
        raise ImageGenerationError(FailureKind.NO_IMAGE_DATA, "No image data returned from API")


def _enum_name(value) -> str:
    if value is None:
        return ""
    return getattr(value, "name", None) or str(value)


# ------------------ IMAGE PROMPTS ----------------


def build_image_prompt(prompt: str, style: str = DEFAULT_STYLE, is_adult: bool = False) -> str:
    selected_style = STYLE_PROMPTS.get(style, STYLE_PROMPTS[FALLBACK_STYLE])
    mood = ADULT_MOOD if is_adult else GENERAL_MOOD
    return fill(IMAGE_TEMPLATE, description=prompt.strip(), style=selected_style, mood=mood).strip()


# ------------------ BATCH IMAGE GENERATION -------


def _pause(seconds: float, sleep: Callable[[float], None], cancel: Optional[threading.Event]) -> None:
    if seconds <= 0:
        return
    if cancel is not None:
        cancel.wait(seconds)
    else:
        sleep(seconds)


def _run_slot(g: GAIC, image_prompt: str, index: int, count: int, policy: RetryPolicy,
              sleep: Callable[[float], None], cancel: Optional[threading.Event]) -> SlotOutcome:
    slot = SlotOutcome(index=index)
    rate_limited = 0

    while slot.attempts < policy.max_attempts:
        if cancel is not None and cancel.is_set():
            if slot.attempts == 0:
                return slot.model_copy(update={"state": SlotState.SKIPPED})
            return slot.model_copy(update={"state": SlotState.ABANDONED})
        try:
            image = g.generate_single_image(image_prompt)
        except ImageGenerationError as e:
            slot = slot.model_copy(update={
                "attempts": slot.attempts + 1,
                "failures": slot.failures + (e.kind,),
                "last_error": str(e),
            })
            if e.kind == FailureKind.RATE_LIMITED:
                rate_limited += 1
                wait = policy.backoff_seconds(rate_limited)
                print(f"[WARN] Quota exceeded (429). Retrying image {index + 1}/{count} in {wait:g}s...")
                _pause(wait, sleep, cancel)
                slot = slot.model_copy(update={"state": SlotState.RETRYING})
                continue
            print(f"[ERROR] Image {index + 1} failed: {e}")
            if (e.kind == FailureKind.TEXT_ONLY and slot.attempts <= policy.text_retries
                    and slot.attempts < policy.max_attempts):
                _pause(policy.text_retry_pause_seconds, sleep, cancel)
                slot = slot.model_copy(update={"state": SlotState.RETRYING})
                continue
            return slot.model_copy(update={"state": SlotState.ABANDONED})
        return slot.model_copy(update={
            "attempts": slot.attempts + 1,
            "state": SlotState.SUCCEEDED,
            "image": image,
        })

    print(f"[ERROR] Image {index + 1} abandoned after {slot.attempts} attempts")
    return slot.model_copy(update={"state": SlotState.ABANDONED})


def run_image_batch(g: GAIC, prompt: str, options: ImageOptions,
                    policy: Optional[RetryPolicy] = None,
                    cancel: Optional[threading.Event] = None,
                    sleep: Optional[Callable[[float], None]] = None) -> BatchReport:
    """
    Generate options.count images one request at a time.

    Never raises for a single slot; every outcome ends up in the report.
    """
    policy = policy or RetryPolicy()
    sleep = sleep or time.sleep
    image_prompt = build_image_prompt(prompt, options.style, options.is_adult)
    g.logger.log(f"IMAGE_PROMPT [x{options.count}]", image_prompt)

    slots: Tuple[SlotOutcome, ...] = ()
    for i in range(options.count):
        if cancel is not None and cancel.is_set():
            slots += tuple(SlotOutcome(index=j, state=SlotState.SKIPPED)
                           for j in range(i, options.count))
            print(f"[WARN] Image batch cancelled after {i}/{options.count} slots")
            return BatchReport(slots=slots, cancelled=True)

        outcome = _run_slot(g, image_prompt, i, options.count, policy, sleep, cancel)
        slots += (outcome,)
        if outcome.state == SlotState.SUCCEEDED:
            print(f"   ✓ Image {i + 1}/{options.count}")
            # polite delay so the next request doesn't trip the rate limiter again
            if i < options.count - 1:
                _pause(policy.politeness_delay_seconds, sleep, cancel)

    cancelled = cancel is not None and cancel.is_set()
    return BatchReport(slots=slots, cancelled=cancelled)


def generate_images(g: GAIC, prompt: str, options: Optional[ImageOptions] = None,
                    policy: Optional[RetryPolicy] = None,
                    cancel: Optional[threading.Event] = None,
                    sleep: Optional[Callable[[float], None]] = None) -> List[str]:
    """
    Returns between 1 and options.count PNG data URIs, in slot order.

    Fewer images than requested is a normal outcome. Raises
    BatchGenerationError only when no slot produced an image, or
    BatchCancelledError when cancellation stopped the batch first.
    """
    options = options or ImageOptions()
    report = run_image_batch(g, prompt, options, policy=policy, cancel=cancel, sleep=sleep)
    images = list(report.images)
    if images:
        return images
    if report.cancelled:
        raise BatchCancelledError(BATCH_CANCELLED_MESSAGE, report)
    raise BatchGenerationError(BATCH_FAILED_MESSAGE, report)


# ------------------ TEXT HELPERS -----------------


def generate_story_idea(g: GAIC, genre: str, is_adult: bool) -> str:
    audience = (
        "The story is intended for a mature audience (18+), so it can deal with complex, dark, or romantic themes deeply."
        if is_adult else "Keep the content suitable for general audiences.")
    prompt = fill(STORY_IDEA_TEMPLATE, audience=audience, genre=genre)
    g.logger.log("STORY_IDEA_PROMPT", prompt)
    try:
        text = g.generate_text(prompt, temperature=0.8, system_instruction=IDEA_SYSTEM_INSTRUCTION)
    except Exception as e:
        print(f"[ERROR] Gemini idea error: {e}")
        return "Error generating idea. Please check your API key or connection."
    return text or "Could not generate idea."


def expand_text(g: GAIC, current_text: str, context: str) -> str:
    # last 500 characters are the immediate narrative context
    recent_text = current_text[-500:] if current_text else ""
    prompt = fill(EXPAND_TEXT_TEMPLATE, context=context, recent_text=recent_text)
    g.logger.log("EXPAND_TEXT_PROMPT", prompt)
    try:
        return g.generate_text(prompt) or ""
    except Exception as e:
        print(f"[ERROR] Gemini expand error: {e}")
        return ""


def suggest_character(g: GAIC, genre: str) -> str:
    prompt = fill(CHARACTER_PROFILE_TEMPLATE, genre=genre)
    g.logger.log("CHARACTER_PROFILE_PROMPT", prompt)
    try:
        return g.generate_text(prompt) or ""
    except Exception as e:
        print(f"[ERROR] Gemini character error: {e}")
        return ""


def translate_to_bengali(g: GAIC, text: str) -> str:
    prompt = fill(TRANSLATE_BENGALI_TEMPLATE, text=text)
    g.logger.log("TRANSLATE_PROMPT", prompt)
    try:
        return g.generate_text(prompt) or ""
    except Exception as e:
        print(f"[ERROR] Gemini translate error: {e}")
        return "Translation failed."


def generate_scene_description(g: GAIC, chapter_content: str, genre: str) -> str:
    prompt = fill(SCENE_DESCRIPTION_TEMPLATE, genre=genre, segment=chapter_content[:2000])
    g.logger.log("SCENE_DESCRIPTION_PROMPT", prompt)
    try:
        return g.generate_text(prompt) or "A dramatic scene from the story."
    except Exception as e:
        print(f"[ERROR] Gemini scene error: {e}")
        return "A scene from the story."


# ------------------ STORY CONTEXT ----------------


def build_story_context(story: Story, chapter_title: str) -> str:
    if story.characters:
        char_list = "\n".join(f"- {c.name} ({c.role}): {c.description}" for c in story.characters)
    else:
        char_list = "No specific character profiles created yet."
    return f"""STORY METADATA:
Title: {story.title}
Genre: {story.genre}

=== SYNOPSIS ===
{story.synopsis}

=== CURRENT CHAPTER TITLE ===
{chapter_title}

=== CHARACTERS & PROFILES ===
{char_list}"""


def enrich_image_prompt(g: GAIC, story: Story, user_text: str = "", chapter_content: str = "") -> str:
    """Turn whatever the writer gave us into a non-empty image description."""
    base = user_text.strip()
    if base:
        return f"""User Description: "{base}"

[Story Context]
Title: "{story.title}"
Genre: {story.genre}
Synopsis: {story.synopsis[:500]}..."""
    if chapter_content and len(chapter_content) > 50:
        # last 1500 characters hold the current scene
        return generate_scene_description(g, chapter_content[-1500:], story.genre)
    return f"""Story Title: "{story.title}"
Genre: {story.genre}
Full Synopsis: {story.synopsis}"""


# ------------------ CLI -------------------------


def _read_file(path: Optional[str]) -> str:
    if not path:
        return ""
    return Path(path).read_text(encoding="utf-8")


def save_images(images: List[str], out_dir: Path) -> List[Path]:
    ensure_dir(out_dir)
    saved = []
    for i, uri in enumerate(images, start=1):
        png = pil_to_png_bytes(image_bytes_to_pil(data_uri_to_bytes(uri)))
        fname = out_dir / f"image-{i:03d}.png"
        fname.write_bytes(png)
        saved.append(fname)
        print(f"   ✓ Image {i} -> {fname}")
    return saved


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kathakar", description="AI co-author for Bengali novels (Gemini).")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("idea", help="Generate a story idea.")
    p.add_argument("--genre", default="Drama", choices=GENRES)
    p.add_argument("--adult", action="store_true")

    p = sub.add_parser("expand", help="Continue a chapter.")
    p.add_argument("file", help="Chapter text file.")
    p.add_argument("--context-file", help="Story context block.")

    p = sub.add_parser("character", help="Suggest a character profile.")
    p.add_argument("--genre", default="Drama", choices=GENRES)

    p = sub.add_parser("translate", help="Translate text into literary Bengali.")
    p.add_argument("text")

    p = sub.add_parser("scene", help="Describe a key scene of a chapter.")
    p.add_argument("file", help="Chapter text file.")
    p.add_argument("--genre", default="Drama", choices=GENRES)

    p = sub.add_parser("images", help="Generate scene illustrations.")
    p.add_argument("prompt")
    p.add_argument("--style", default=DEFAULT_STYLE, choices=sorted(STYLE_PROMPTS))
    p.add_argument("--count", type=int, default=1)
    p.add_argument("--adult", action="store_true")
    p.add_argument("--out", default="output", help="Output directory.")
    return parser


def main(argv: Optional[List[str]] = None, g: Optional[GAIC] = None) -> int:
    args = build_parser().parse_args(argv)
    if g is None:
        g = GAIC(Settings.from_env())

    if args.command == "idea":
        print(generate_story_idea(g, args.genre, args.adult))
    elif args.command == "expand":
        print(expand_text(g, _read_file(args.file), _read_file(args.context_file)))
    elif args.command == "character":
        print(suggest_character(g, args.genre))
    elif args.command == "translate":
        print(translate_to_bengali(g, args.text))
    elif args.command == "scene":
        print(generate_scene_description(g, _read_file(args.file), args.genre))
    elif args.command == "images":
        out_dir = Path(args.out)
        ensure_dir(out_dir)
        g.logger.out_file = out_dir / "prompts_used.txt"
        options = ImageOptions(is_adult=args.adult, style=args.style, count=args.count)
        print(f">> Generating {options.count} image(s) ({options.style})...")
        try:
            images = generate_images(g, args.prompt, options)
        except BatchGenerationError as e:
            print(f"[ERROR] {e}")
            print(describe_generation_error(e), file=sys.stderr)
            return 1
        finally:
            g.logger.flush()
        save_images(images, out_dir)
        if len(images) < options.count:
            print(f"   ! Only {len(images)} of {options.count} images were generated.")
        print(f">> Done. Output at: {out_dir}")
    return 0
