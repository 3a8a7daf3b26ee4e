"""
StopFakeAI Backend API Server
Flask application providing the AI-text detection endpoints.
"""
import logging
import time
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from accounts import AccountStore
from external_api import APIError, ExternalDetectionClient
from text_detector import (
    DemoModeStrategy, DetectionError, DetectionRequest, DetectionRouter, DetectionSettings,
    PatternClassifier, ResultCache, TextDetectionService,
)
from usage import QuotaGate, RateLimiter, rate_limit_headers

logger = logging.getLogger(__name__)

SERVICE_NAME = 'StopFakeAI Text Detection API'
VERSION = '1.0.0'


def _bearer_token() -> Optional[str]:
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header.split(' ', 1)[1].strip() or None
    return None


def _error_response(error):
    """Render a DetectionError or APIError as a JSON error response."""
    if isinstance(error, APIError):
        # Upstream problems are server-side from the caller's point of view
        return jsonify(error.to_dict()), 500
    return jsonify(error.to_dict()), error.status_code


def create_app(settings: Optional[DetectionSettings] = None,
               store: Optional[AccountStore] = None,
               api_client: Optional[ExternalDetectionClient] = None,
               cache: Optional[ResultCache] = None,
               rate_limiter: Optional[RateLimiter] = None) -> Flask:
    """
    Build the Flask app and the detection services it shares across requests.

    Anything not passed in is constructed from ``settings`` (which defaults to
    the environment).
    """
    settings = settings or DetectionSettings.from_env()

    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend requests

    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=["100 per hour"],
        storage_uri="memory://"
    )

    store = store or AccountStore(settings.accounts_file)
    cache = cache or ResultCache(settings.cache_max_entries, settings.cache_ttl_seconds)
    rate_limiter = rate_limiter or RateLimiter()
    if api_client is None:
        api_client = ExternalDetectionClient(
            gptzero_api_key=settings.gptzero_api_key,
            huggingface_api_key=settings.huggingface_api_key,
            timeout=settings.api_timeout_seconds,
            max_retries=settings.api_max_retries,
            retry_delay=settings.api_retry_delay_seconds,
        )

    router = DetectionRouter(
        cache=cache,
        classifier=PatternClassifier(),
        api_client=api_client,
        demo_strategy=DemoModeStrategy() if settings.demo_mode else None,
        yearly_api_min_length=settings.yearly_api_min_length,
    )
    quota_gate = QuotaGate(store, free_daily_checks=settings.free_daily_checks)
    service = TextDetectionService(router, quota_gate, rate_limiter, settings)

    app.extensions['detection_service'] = service
    app.extensions['account_store'] = store

    mode = 'live API' if api_client.is_configured else ('demo' if settings.demo_mode else 'heuristic-only')
    logger.info(f"Text detection initialized in {mode} mode")

    @app.errorhandler(429)
    def ip_rate_limited(e):
        """Render Flask-Limiter's per-IP 429 in the same JSON shape as the API errors."""
        current = limiter.current_limit
        reset_time = current.reset_at if current is not None else time.time()
        logger.warning(f"Per-IP limit hit for {get_remote_address()}: {e.description}")
        return jsonify({
            'success': False,
            'error': 'Too many requests from this address. Please slow down.',
            'code': 'IP_RATE_LIMITED',
            'retryable': True,
            'resetTime': reset_time,
        }), 429

    @app.route('/')
    @app.route('/api/health')
    def health_check():
        """Health check endpoint with cache and vendor status."""
        return jsonify({
            'status': 'ok',
            'service': SERVICE_NAME,
            'version': VERSION,
            'mode': mode,
            'vendors': api_client.available_vendors,
            'cache': cache.info(),
            'endpoints': {
                'detect_text': '/api/detect-text (POST)',
                'user_status': '/api/user/status (GET)'
            }
        })

    @app.route('/api/detect-text', methods=['POST'])
    @limiter.limit(settings.ip_rate_limit)
    def detect_text():
        """
        Detect if the given text is AI-generated or human-written.

        Request body:
            {
                "text": "The text to analyze"
            }

        Response:
            {
                "success": true,
                "likelyAI": true|false,
                "score": 0-1,
                "language": {"detected", "code", "accuracy", "warning"},
                "details": {"method": "cache|pattern|api|ml-model|demo", ...},
                "costSaved": dollars,
                "usage": {...}
            }
        """
        try:
            user = store.authenticate(_bearer_token())

            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                data = {}
            detection_request = DetectionRequest(
                text=data.get('text'),
                user_id=user.user_id,
                subscription_tier=user.subscription_tier,
            )
            result = service.detect(detection_request)

            response = jsonify(result.to_dict())
            response.headers.update(rate_limit_headers(result.rate_limit))
            return response

        except (DetectionError, APIError) as e:
            if isinstance(e, APIError):
                logger.error(f"Text detection failed upstream: {e!r}")
            return _error_response(e)

        except Exception as e:
            logger.exception(f"Text detection error: {e}")
            return jsonify({
                'success': False,
                'error': 'An unexpected error occurred. Please try again.',
                'code': 'INTERNAL_ERROR'
            }), 500

    @app.route('/api/user/status', methods=['GET'])
    def user_status():
        """Subscription tier and today's usage for the authenticated user."""
        try:
            user = store.authenticate(_bearer_token())
            account = store.get_account(user.user_id)
            quota = quota_gate.status(user.user_id)

            return jsonify({
                'success': True,
                'subscription_tier': account.subscription_tier.value,
                'daily_checks': quota.daily_checks,
                'daily_limit': quota.daily_limit,
                'remaining_checks': quota.remaining,
                'last_check_reset': store.get_quota(user.user_id).last_reset_date.isoformat(),
                'has_active_subscription': account.subscription_tier.value != 'free',
            })

        except DetectionError as e:
            return _error_response(e)

        except Exception as e:
            logger.exception(f"User status error: {e}")
            return jsonify({
                'success': False,
                'error': 'Failed to fetch user status',
                'code': 'INTERNAL_ERROR'
            }), 500

    return app


app = create_app()
