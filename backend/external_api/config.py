"""
Configuration for the External API module.
"""

# Request settings
API_TIMEOUT_SECONDS = 45  # Generous: vendors are slow on long documents
API_MAX_RETRIES = 2
API_RETRY_DELAY_SECONDS = 1.0  # Doubled on every retry

# GPTZero: $45 for 300K words
API_COST_PER_WORD = 0.00015

# Vendor endpoints
GPTZERO_URL = 'https://api.gptzero.me/v2/predict/text'
HUGGINGFACE_MODEL = 'roberta-base-openai-detector'
HUGGINGFACE_URL = f'https://api-inference.huggingface.co/models/{HUGGINGFACE_MODEL}'

USER_AGENT = 'StopFakeAI-Backend/1.0'
