"""
Generation lifecycle tracking.

Holds the in-flight generations, drives their cosmetic progress on a
timer, and moves each one into history when it completes, fails or is
cancelled. State transitions per generation:

    processing → completed
    processing → failed

Progress ticks and the simulated completion are not derived from the
provider. The simulated completion stands in for real task polling,
which would call GenerationAPIClient.check_status instead.
"""
import asyncio
import logging
import random
from typing import List, Optional, Set, Tuple

from core.video import ValidationError, generate_generation_id, validate_video_request
from studio.client import GenerationAPIClient
from studio.history import HISTORY_LIMIT, HistoryStore
from studio.models import COMPLETED, FAILED, PROCESSING, Generation, GenerationConfig, utc_now_iso
from video.schemas import VideoGenerationRequest, VideoGenerationResponse

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled by user"
PLACEHOLDER_VIDEO_URL = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"
TICK_INTERVAL = 3.0
TICK_INCREMENT = (2.0, 10.0)
TICK_CEILING = 90
COMPLETION_DELAY = (5.0, 10.0)


class GenerationTracker:
    """
    In-memory owner of every generation in this session.

    Args:
        client: Proxy client used for submissions
        history_store: Persistence boundary for terminal generations
        tick_interval: Seconds between progress ticks
        completion_delay: (min, max) seconds before a processing
            generation is marked completed
        placeholder_url: Video URL given to simulated completions
        rng: Random source for ticks and delays
    """

    def __init__(
        self,
        client: GenerationAPIClient,
        history_store: HistoryStore,
        tick_interval: float = TICK_INTERVAL,
        completion_delay: Tuple[float, float] = COMPLETION_DELAY,
        placeholder_url: str = PLACEHOLDER_VIDEO_URL,
        rng: Optional[random.Random] = None
    ):
        self.client = client
        self.history_store = history_store
        self.tick_interval = tick_interval
        self.completion_delay = completion_delay
        self.placeholder_url = placeholder_url
        self.rng = rng or random.Random()

        self._active: List[Generation] = []
        self._history: List[Generation] = history_store.load()[:HISTORY_LIMIT]
        self._pending_submits = 0
        self._ticker: Optional[asyncio.Task] = None
        self._timers: Set[asyncio.Task] = set()

    @property
    def active(self) -> List[Generation]:
        return list(self._active)

    @property
    def history(self) -> List[Generation]:
        return list(self._history)

    @property
    def is_generating(self) -> bool:
        """True while at least one submission is waiting on the proxy."""
        return self._pending_submits > 0

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def completed_count(self) -> int:
        return sum(1 for g in self._history if g.status == COMPLETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for g in self._history if g.status == FAILED)

    def get(self, generation_id: str) -> Optional[Generation]:
        """Find a generation among active ones first, then history."""
        for generation in self._active + self._history:
            if generation.id == generation_id:
                return generation
        return None

    def _find_active(self, generation_id: str) -> Optional[Generation]:
        for generation in self._active:
            if generation.id == generation_id:
                return generation
        return None

    async def start(self, prompt: str, config: GenerationConfig) -> Generation:
        """
        Submit a new generation.

        Args:
            prompt: User prompt, trimmed before use
            config: Generation settings

        Returns:
            Generation: The generation as it stands once the proxy answered

        Raises:
            ValidationError: If the prompt or settings are not allowed;
                nothing is added and no request is sent
        """
        error = validate_video_request(prompt, config.duration, config.aspect_ratio)
        if error:
            raise ValidationError(error)

        generation = Generation(
            id=self._unique_id(),
            prompt=prompt.strip(),
            config=config,
            status=PROCESSING,
            progress=0
        )
        self._active.append(generation)
        logger.info(f"Started generation {generation.id} ({config.duration}s, {config.aspect_ratio})")

        request = VideoGenerationRequest(
            prompt=generation.prompt,
            duration=config.duration,
            aspect_ratio=config.aspect_ratio,
            style=config.style,
            quality=config.quality
        )

        self._pending_submits += 1
        try:
            response = await self.client.submit(request)
        except Exception as e:
            # client.submit already normalizes failures; this is the tracker's own boundary
            logger.error(f"Submit for generation {generation.id} raised: {e}", exc_info=True)
            response = VideoGenerationResponse(success=False, error=str(e) or "Unknown error", status="failed")
        finally:
            self._pending_submits -= 1

        if self._find_active(generation.id) is None:
            logger.info(f"Generation {generation.id} left the queue before submit returned")
            return generation

        if response.success and response.status == COMPLETED and response.video_url:
            self._finish(generation, COMPLETED, video_url=response.video_url)
        elif response.success and response.status == PROCESSING:
            generation.task_id = response.task_id
            generation.progress = max(generation.progress, 5)
            self._schedule_completion(generation.id)
        else:
            generation.progress = 0
            self._finish(generation, FAILED, error=response.error or "Generation failed")

        return generation

    async def retry(self, generation: Generation) -> Generation:
        """Resubmit with the same prompt and config under a new id."""
        logger.info(f"Retrying generation {generation.id}")
        return await self.start(generation.prompt, generation.config)

    def cancel(self, generation_id: str) -> Optional[Generation]:
        """
        Cancel a processing generation.

        Pending timers and in-flight requests are left alone; they find
        the generation gone from the active set and do nothing.

        Returns:
            The cancelled generation, or None if there was nothing to cancel
        """
        generation = self._find_active(generation_id)
        if generation is None or generation.status != PROCESSING:
            return None

        self._finish(generation, FAILED, error=CANCELLED_MESSAGE)
        logger.info(f"Cancelled generation {generation_id}")
        return generation

    def complete_simulated(self, generation_id: str) -> Optional[Generation]:
        """Mark a still-active generation completed with the placeholder video."""
        generation = self._find_active(generation_id)
        if generation is None or generation.status != PROCESSING:
            return None

        self._finish(generation, COMPLETED, video_url=self.placeholder_url)
        return generation

    def tick(self) -> None:
        """Advance cosmetic progress of every processing generation, never past 90."""
        for generation in self._active:
            if generation.status == PROCESSING and generation.progress < TICK_CEILING:
                increment = self.rng.uniform(*TICK_INCREMENT)
                generation.progress = min(generation.progress + increment, TICK_CEILING)

    def clear_history(self) -> None:
        self._history = []
        self.history_store.clear()

    def export_history(self) -> str:
        return self.history_store.export()

    def import_history(self, text: str) -> bool:
        """Replace history from exported JSON; reloads the in-memory list on success."""
        if not self.history_store.import_(text):
            return False
        self._history = self.history_store.load()
        return True

    def _unique_id(self) -> str:
        generation_id = generate_generation_id()
        while self.get(generation_id) is not None:
            generation_id = generate_generation_id()
        return generation_id

    def _finish(
        self,
        generation: Generation,
        status: str,
        video_url: Optional[str] = None,
        error: Optional[str] = None
    ) -> None:
        self._active = [g for g in self._active if g.id != generation.id]

        generation.status = status
        generation.completed_at = utc_now_iso()
        if status == COMPLETED:
            generation.video_url = video_url
            generation.error = None
            generation.progress = 100
        else:
            generation.video_url = None
            generation.error = error

        self._history.insert(0, generation)
        del self._history[HISTORY_LIMIT:]
        # Blocking write on the loop; the file holds at most HISTORY_LIMIT small records
        self.history_store.save(generation)
        logger.info(f"Generation {generation.id} finished as {status}")

    def _schedule_completion(self, generation_id: str) -> None:
        delay = self.rng.uniform(*self.completion_delay)
        timer = asyncio.create_task(self._complete_after(generation_id, delay))
        self._timers.add(timer)
        timer.add_done_callback(self._timers.discard)

    async def _complete_after(self, generation_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        self.complete_simulated(generation_id)

    async def _run_ticker(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.tick()

    def start_ticker(self) -> None:
        """Start the progress ticker on the running event loop."""
        if self._ticker is None or self._ticker.done():
            self._ticker = asyncio.create_task(self._run_ticker())

    async def aclose(self) -> None:
        """Stop the ticker and any pending simulated completions."""
        tasks = list(self._timers)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers.clear()
