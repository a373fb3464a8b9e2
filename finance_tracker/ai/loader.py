import logging

import google.generativeai as genai
from openai import OpenAI

from finance_tracker.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class AILoader:
    """Holds the optional AI provider clients, created once at startup."""
    _instance = None
    openai_client = None
    gemini_model = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(AILoader, cls).__new__(cls)
        return cls._instance

    @classmethod
    def load(cls, settings: Settings = default_settings):
        cls.openai_client = None
        cls.gemini_model = None

        if settings.GEMINI_API_KEY:
            try:
                genai.configure(api_key=settings.GEMINI_API_KEY)
                cls.gemini_model = genai.GenerativeModel(model_name=settings.GEMINI_MODEL)
                logger.info("Gemini suggestions enabled (%s)", settings.GEMINI_MODEL)
            except Exception as e:
                logger.warning("Gemini client failed to init: %s", e)

        if settings.OPENAI_API_KEY:
            try:
                cls.openai_client = OpenAI(api_key=settings.OPENAI_API_KEY)
                logger.info("OpenAI suggestions enabled (%s)", settings.OPENAI_MODEL)
            except Exception as e:
                logger.warning("OpenAI client failed to init: %s", e)

    @classmethod
    def get_gemini(cls):
        return cls.gemini_model

    @classmethod
    def get_openai(cls):
        return cls.openai_client

    @classmethod
    def status(cls) -> str:
        if cls.gemini_model:
            return "gemini"
        if cls.openai_client:
            return "openai"
        return "heuristic"
