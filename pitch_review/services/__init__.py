# External collaborators: language model, URL probe, storage, notifications
from .llm_client import LLMClient
from .url_probe import UrlProbe
from .store import InMemoryPitchStore, PitchStore, ServiceCredential, UserDirectory
from .notifier import LoggingNotificationSender, NotificationSender, Notifier
