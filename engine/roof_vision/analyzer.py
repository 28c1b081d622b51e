import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

from engine.errors import InvalidImageError, VisionAnalysisError
from engine.roof_vision.heuristic import HeuristicRoofEstimator
from engine.roof_vision.prompt import EXISTING_INSTALLATION_PROMPT, ROOF_ANALYSIS_PROMPT
from engine.roof_vision.providers import GeminiVisionProvider
from engine.roof_vision.sanitize import combine_analyses, sanitize_existing_installation, sanitize_roof
from models.schemas import RoofAnalysis, RoofImage
from tools.gemini_client import is_rate_limited

logger = logging.getLogger(__name__)

ROOF = "roof"
EXISTING_INSTALLATION = "existing_installation"

PROMPTS: Dict[str, str] = {
    ROOF: ROOF_ANALYSIS_PROMPT,
    EXISTING_INSTALLATION: EXISTING_INSTALLATION_PROMPT,
}

SANITIZERS: Dict[str, Callable] = {
    ROOF: sanitize_roof,
    EXISTING_INSTALLATION: sanitize_existing_installation,
}

MAX_IMAGES = 3


class RoofVisionAnalyzer:
    """Runs roof photos through the vision model chain.

    Each kind of analysis has its own failure mode: ``strict`` raises when the
    chain fails, ``heuristic`` falls back to the synthetic estimator.
    """

    def __init__(
        self,
        providers: Sequence[GeminiVisionProvider],
        roof_mode: str = "strict",
        improvement_mode: str = "heuristic",
        estimator: Optional[HeuristicRoofEstimator] = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ):
        self.providers = list(providers)
        self.modes = {ROOF: roof_mode, EXISTING_INSTALLATION: improvement_mode}
        self.estimator = estimator or HeuristicRoofEstimator()
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def analyze_roof(self, images: List[RoofImage]) -> RoofAnalysis:
        return await self._analyze(images, ROOF)

    async def analyze_existing_installation(self, images: List[RoofImage]) -> RoofAnalysis:
        return await self._analyze(images, EXISTING_INSTALLATION)

    async def _analyze(self, images: List[RoofImage], kind: str) -> RoofAnalysis:
        try:
            return await self._analyze_images(images[:MAX_IMAGES], kind)
        except VisionAnalysisError as e:
            if self.modes[kind] == "strict":
                logger.error(f"[roof_vision] {kind} analysis failed: {e}")
                raise
            logger.warning(f"[roof_vision] {kind} analysis failed, using heuristic estimate: {e}")
            if kind == ROOF:
                return self.estimator.estimate_roof()
            return self.estimator.estimate()

    async def _analyze_images(self, images: List[RoofImage], kind: str) -> RoofAnalysis:
        if not self.providers:
            raise VisionAnalysisError("Vision API is not configured", service="vision")
        if not images:
            raise VisionAnalysisError("No images to analyse", service="vision")
        if len(images) == 1:
            return await self._run_chain(images[0], kind)

        outcomes = await asyncio.gather(
            *(self._run_chain(image, kind) for image in images), return_exceptions=True
        )
        analyses = [o for o in outcomes if isinstance(o, RoofAnalysis)]
        failures = [o for o in outcomes if isinstance(o, BaseException)]
        for index, failure in enumerate(failures):
            if not isinstance(failure, Exception):
                raise failure
            logger.warning(f"[roof_vision] Dropping failed image analysis {index + 1}/{len(images)}: {failure}")

        if not analyses:
            invalid = [f for f in failures if isinstance(f, InvalidImageError)]
            if invalid:
                raise invalid[0]
            raise VisionAnalysisError(f"All {len(images)} image analyses failed", service="vision")
        return combine_analyses(analyses)

    async def _run_chain(self, image: RoofImage, kind: str) -> RoofAnalysis:
        prompt = PROMPTS[kind]
        sanitize = SANITIZERS[kind]
        last_error = "no attempts made"

        for provider in self.providers:
            for attempt in range(1, self.max_retries + 1):
                logger.info(f"[{provider.model_name}] Attempt {attempt}/{self.max_retries}")
                try:
                    parsed = await provider.analyze(image, prompt)
                    analysis = sanitize(parsed, provider.model_name)
                    logger.info(f"[{provider.model_name}] Success with confidence {analysis.ai_confidence}")
                    return analysis
                except InvalidImageError:
                    raise
                except VisionAnalysisError as e:
                    last_error = str(e)
                    logger.warning(f"[{provider.model_name}] Non-conforming reply: {e}")
                except Exception as e:
                    # SDK and transport errors vary by provider; all are retried or skipped here
                    last_error = str(e)
                    if is_rate_limited(e):
                        logger.warning(f"[{provider.model_name}] Rate limited, trying next model")
                        break
                    logger.error(f"[{provider.model_name}] Attempt {attempt} failed: {e}")
                    if attempt < self.max_retries:
                        await asyncio.sleep(self.retry_delay)

        raise VisionAnalysisError(f"All AI models failed. Last error: {last_error}", service="vision")
