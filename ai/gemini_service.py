"""
GeminiService - text generation on Google Vertex AI (Gemini)

This is the single content generator used across the platform:

    from ai.gemini_service import GeminiService

    service = GeminiService()
    text = service.generate("Summarize this course: ...")

    # JSON output, markdown fences stripped
    data = service.generate_json("Return a JSON object with ...")

Every failure (missing configuration, API error, timeout, empty or unparseable
response) surfaces as ExternalServiceFailure so callers can fall back to
locally built content.
"""
import logging
import json
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Optional
from django.conf import settings
from google.cloud import aiplatform
from google.oauth2 import service_account
from vertexai.generative_models import GenerativeModel
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from decouple import config

from .exceptions import ExternalServiceFailure

logger = logging.getLogger(__name__)

SERVICE_NAME = 'gemini'


class GeminiService:
    """
    Vertex AI Gemini client implementing generate(prompt) -> text.

    Calls are single-shot and bounded by EXTERNAL_SERVICE_TIMEOUT; there is
    no retry.
    """

    _initialized = False

    def __init__(self, timeout: Optional[int] = None):
        self.project_id = settings.GCP_PROJECT_ID
        self.location = settings.VERTEX_AI_LOCATION
        self.model_name = settings.GEMINI_MODEL
        self.timeout = timeout or settings.EXTERNAL_SERVICE_TIMEOUT

        if not self.project_id:
            logger.warning("GCP_PROJECT_ID not set, Gemini generation will use fallbacks")

    def _get_credentials(self) -> Optional[service_account.Credentials]:
        """
        Service account credentials from GOOGLE_APPLICATION_CREDENTIALS, if set.
        Otherwise Vertex AI uses application default credentials.
        """
        creds_path = config('GOOGLE_APPLICATION_CREDENTIALS', default=None)
        if creds_path and os.path.exists(creds_path):
            return service_account.Credentials.from_service_account_file(creds_path)
        return None

    def _ensure_initialized(self):
        if not self.project_id:
            raise ExternalServiceFailure(SERVICE_NAME, "GCP_PROJECT_ID is not configured")

        if GeminiService._initialized:
            return

        try:
            credentials = self._get_credentials()
            init_kwargs = {'project': self.project_id, 'location': self.location}
            if credentials:
                init_kwargs['credentials'] = credentials
            aiplatform.init(**init_kwargs)
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError, ValueError, OSError) as e:
            logger.error(f"Failed to initialize Vertex AI: {e}", exc_info=True)
            raise ExternalServiceFailure(SERVICE_NAME, f"initialization failed: {e}")

        GeminiService._initialized = True
        logger.info(f"Vertex AI initialized for project: {self.project_id}, location: {self.location}")

    def _call_model(self, prompt: str, system_instruction: Optional[str], temperature: float) -> str:
        model_kwargs = {}
        if system_instruction:
            model_kwargs['system_instruction'] = system_instruction

        model = GenerativeModel(model_name=self.model_name, **model_kwargs)
        response = model.generate_content(
            prompt,
            generation_config={'temperature': temperature}
        )
        return response.text

    def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: User prompt (required)
            system_instruction: Optional system instruction
            temperature: Sampling temperature (0.0-1.0)

        Returns:
            The response text

        Raises:
            ExternalServiceFailure: on any failure or after the timeout
        """
        if not prompt:
            raise ValueError("prompt is required")

        self._ensure_initialized()

        logger.debug(f"Generating content with model: {self.model_name}")
        logger.debug(f"Prompt: {prompt[:100]}...")

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._call_model, prompt, system_instruction, temperature)
        try:
            text = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            logger.warning(f"Gemini call timed out after {self.timeout}s")
            raise ExternalServiceFailure(SERVICE_NAME, f"timed out after {self.timeout}s")
        except (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError) as e:
            logger.error(f"Google API error: {e}")
            raise ExternalServiceFailure(SERVICE_NAME, f"API error: {e}")
        except ValueError as e:
            # response.text raises ValueError when the candidate was blocked or empty
            logger.warning(f"Gemini returned no usable text: {e}")
            raise ExternalServiceFailure(SERVICE_NAME, f"empty response: {e}")
        except Exception as e:
            logger.error(f"Unexpected error generating content: {e}", exc_info=True)
            raise ExternalServiceFailure(SERVICE_NAME, f"unexpected error: {e}")
        finally:
            executor.shutdown(wait=False)

        if not text or not text.strip():
            raise ExternalServiceFailure(SERVICE_NAME, "empty response")

        return text

    def generate_json(self, prompt: str, system_instruction: Optional[str] = None, temperature: float = 0.7) -> Any:
        """
        Generate and parse a JSON response, stripping markdown code fences.
        """
        raw_text = self.generate(prompt, system_instruction=system_instruction, temperature=temperature)
        return parse_json_response(raw_text)


def parse_json_response(raw_text: str) -> Any:
    cleaned_text = raw_text.strip()
    if cleaned_text.startswith('```json'):
        cleaned_text = cleaned_text[7:]
    elif cleaned_text.startswith('```'):
        cleaned_text = cleaned_text[3:]

    if cleaned_text.endswith('```'):
        cleaned_text = cleaned_text[:-3]

    try:
        return json.loads(cleaned_text.strip())
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response: {e}")
        logger.debug(f"Raw response: {raw_text}")
        raise ExternalServiceFailure(SERVICE_NAME, f"invalid JSON response: {e}")
