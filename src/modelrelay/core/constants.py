"""
Constantes globales pour modelrelay.
"""

# ============================================================================
# TRANSPORT
# ============================================================================
DEFAULT_TIMEOUT = 120.0  # secondes
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_IMAGE_MODEL = "flux"
SSE_DATA_PREFIX = "data: "
SSE_DONE_SENTINEL = "[DONE]"
CONVERSATIONAL_TASK = "conversational"

# ============================================================================
# PROXIES CORS (ordre = ordre de rotation)
# ============================================================================
DEFAULT_CORS_PROXIES = (
    "https://corsproxy.io/?",
    "https://api.allorigins.win/raw?url=",
    "https://cloudflare-cors-anywhere.queakchannel42.workers.dev/?",
    "https://proxy.cors.sh/",
    "https://cors-anywhere.herokuapp.com/",
    "https://thingproxy.freeboard.io/fetch/",
    "https://cors.bridged.cc/",
    "https://cors-proxy.htmldriven.com/?url=",
    "https://yacdn.org/proxy/",
    "https://api.codetabs.com/v1/proxy?quest=",
)

# ============================================================================
# ENDPOINTS PROVIDERS
# ============================================================================
AZURE_BASE_URL = "https://host.g4f.dev/api/Azure"
DEEPINFRA_BASE_URL = "https://api.deepinfra.com/v1/openai"

POLLINATIONS_BASE_URL = "https://text.pollinations.ai"
POLLINATIONS_CHAT_ENDPOINT = "https://text.pollinations.ai/openai"
POLLINATIONS_IMAGE_ENDPOINT = "https://image.pollinations.ai/prompt/{prompt}"
POLLINATIONS_TEXT_MODELS_URL = "https://text.pollinations.ai/models"
POLLINATIONS_IMAGE_MODELS_URL = "https://image.pollinations.ai/models"
POLLINATIONS_REFERRER = "https://g4f.dev"

TOGETHER_BASE_URL = "https://api.together.xyz/v1"

HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co/v1"
HUGGINGFACE_ROUTER_URL = "https://router.huggingface.co"
HUGGINGFACE_HUB_API = "https://huggingface.co/api/models"
HUGGINGFACE_WARM_MODELS_URL = (
    "https://huggingface.co/api/models?inference=warm&expand[]=inferenceProviderMapping"
)

PUTER_MODELS_URL = "https://api.puter.com/puterai/chat/models/"
PUTER_BLOCKLIST = frozenset({"abuse", "costly", "fake", "model-fallback-test-1"})

# ============================================================================
# CATALOGUE DE SECOURS (Pollinations, échec total de la découverte)
# ============================================================================
POLLINATIONS_FALLBACK_MODELS = (
    {"id": "gpt-4.1-mini", "type": "chat"},
    {"id": "deepseek-v3", "type": "chat"},
    {"id": "flux", "type": "image"},
    {"id": "gpt-image", "type": "image"},
)
