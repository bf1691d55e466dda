"""Optional narration audio via OpenAI speech synthesis."""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

from openai import AsyncOpenAI, OpenAIError

from demosmith.core.config import CONFIG, TTSConfig
from demosmith.core.exceptions import GeneratorError
from demosmith.generator.narration import NarrationTimeline

logger = logging.getLogger(__name__)

AUDIO_DIR = "audio"


class NarrationSynthesizer:
    """
    Speaks each narration segment into its own audio file.

    Files are named ``audio/segment-NNN.mp3`` after the segment index so
    they can be laid against the timeline's start offsets.
    """

    def __init__(
        self,
        config: Optional[TTSConfig] = None,
        client: Optional[Any] = None,
    ):
        """
        Args:
            config: Speech settings (CONFIG.tts if None)
            client: Pre-built AsyncOpenAI-compatible client
        """
        self.config = config or CONFIG.tts
        self._client = client

    @property
    def client(self) -> Any:
        """AsyncOpenAI client, created on first use."""
        if self._client is None:
            try:
                self._client = AsyncOpenAI(
                    api_key=self.config.api_key or None,  # Uses OPENAI_API_KEY env if None
                    timeout=self.config.timeout,
                )
            except OpenAIError as e:
                raise GeneratorError("tts", str(e))
        return self._client

    async def synthesize(
        self,
        timeline: NarrationTimeline,
        output_dir: Union[str, Path],
    ) -> List[str]:
        """
        Synthesize every segment of a timeline.

        Args:
            timeline: Narration timeline to speak
            output_dir: Session output directory

        Returns:
            Paths of the written audio files, in segment order

        Raises:
            GeneratorError: The speech API rejected a request
        """
        audio_dir = Path(output_dir) / AUDIO_DIR
        audio_dir.mkdir(parents=True, exist_ok=True)

        paths = []
        for segment in timeline.segments:
            target = audio_dir / f"segment-{segment.index:03d}.mp3"
            try:
                response = await self.client.audio.speech.create(
                    model=self.config.model,
                    voice=self.config.voice,
                    input=segment.text,
                )
            except OpenAIError as e:
                raise GeneratorError("tts", f"segment {segment.index}: {e}")

            target.write_bytes(response.content)
            paths.append(str(target))
            logger.debug(f"🔊 Synthesized segment {segment.index} ({segment.duration_ms}ms slot)")

        logger.info(f"Synthesized {len(paths)} narration segments into {audio_dir}")
        return paths
