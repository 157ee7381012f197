"""Speech synthesis: streaming session state machine and WAV assembly."""

from podcast_trends.speech.narrator import EpisodeNarrator, estimate_duration_seconds
from podcast_trends.speech.session import (
    AudioSynthesizer,
    CompletionLatch,
    InlineAudio,
    SpeechMessage,
    SynthesisRun,
    SynthesisState,
    SynthesizedAudio,
)
from podcast_trends.speech.wav import assemble_wav, audio_extension, create_wav_header

__all__ = [
    "AudioSynthesizer",
    "CompletionLatch",
    "EpisodeNarrator",
    "InlineAudio",
    "SpeechMessage",
    "SynthesisRun",
    "SynthesisState",
    "SynthesizedAudio",
    "assemble_wav",
    "audio_extension",
    "create_wav_header",
    "estimate_duration_seconds",
]
