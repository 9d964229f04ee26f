from .logging_config import get_logger, setup_logging
from .speech import BACK_LANGUAGE, FRONT_LANGUAGE, CloudSpeechPort, NullSpeechPort, SpeechPort, build_speech_port
from .tts import AudioFile, TTSClient, TTSVoiceConfig
