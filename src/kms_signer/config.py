"""Configuration settings for the KMS-backed signers."""

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

# AWS environment variables
ENV_AWS_KEY_ID = "AWS_KEY_ID"
ENV_AWS_REGION = "AWS_REGION"
ENV_AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"  # noqa: S105
ENV_AWS_SESSION_TOKEN = "AWS_SESSION_TOKEN"  # noqa: S105
ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"

# Google Cloud environment variables
ENV_PROJECT_ID = "GOOGLE_CLOUD_PROJECT"
ENV_LOCATION_ID = "GOOGLE_CLOUD_REGION"
ENV_KEY_RING_ID = "KEY_RING"
ENV_KEY_ID = "KEY_NAME"
ENV_KEY_VERSION = "KEY_VERSION"
ENV_SERVICE_ACCOUNT_PATH = "GOOGLE_APPLICATION_CREDENTIALS"


def _strip_required(v: str) -> str:
    if not v or not v.strip():
        msg = "Field cannot be empty or whitespace"
        raise ValueError(msg)
    return v.strip()


def _strip_optional(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    return v.strip()


class AwsKmsCredentials(BaseModel):
    """Identifies the AWS KMS key used for signing.

    Only ``key_id`` is required. Anything left unset is resolved by boto3's
    default credential chain (environment, shared config, instance role).
    """

    model_config = ConfigDict(frozen=True)

    key_id: str
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = Field(default=None, repr=False)
    session_token: str | None = Field(default=None, repr=False)
    endpoint_url: str | None = None

    @field_validator("key_id")
    @classmethod
    def validate_key_id(cls, v: str) -> str:
        """Validate that the key id is not empty or whitespace."""
        return _strip_required(v)

    @field_validator("region", "access_key_id", "secret_access_key", "session_token", "endpoint_url")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        """Treat blank optional values as unset."""
        return _strip_optional(v)

    @classmethod
    def from_env(cls) -> "AwsKmsCredentials":
        """
        Create credentials from environment variables.

        Returns:
            AwsKmsCredentials: Credentials with values from environment variables.

        Example:
            ```python
            credentials = AwsKmsCredentials.from_env()
            account = KmsAccount.from_aws(credentials)
            ```
        """
        return cls(
            key_id=os.getenv(ENV_AWS_KEY_ID, ""),
            region=os.getenv(ENV_AWS_REGION),
            access_key_id=os.getenv(ENV_AWS_ACCESS_KEY_ID),
            secret_access_key=os.getenv(ENV_AWS_SECRET_ACCESS_KEY),
            session_token=os.getenv(ENV_AWS_SESSION_TOKEN),
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
        )


class GoogleKmsConfig(BaseModel):
    """Application settings for Google Cloud KMS."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    location_id: str
    key_ring_id: str
    key_id: str
    key_version: int = Field(default=1, ge=1)
    service_account_path: str | None = None

    @field_validator("project_id", "location_id", "key_ring_id", "key_id")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Validate that fields are not empty or whitespace."""
        return _strip_required(v)

    @field_validator("service_account_path")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_optional(v)

    @property
    def key_version_path(self) -> str:
        """Get the full path to the key version in Cloud KMS."""
        return (
            f"projects/{self.project_id}/locations/{self.location_id}/"
            f"keyRings/{self.key_ring_id}/cryptoKeys/{self.key_id}/cryptoKeyVersions/{self.key_version}"
        )

    @classmethod
    def from_env(cls) -> "GoogleKmsConfig":
        """
        Create configuration from environment variables.

        Returns:
            GoogleKmsConfig: Configuration instance with values from environment variables.
        """
        return cls(
            project_id=os.getenv(ENV_PROJECT_ID, ""),
            location_id=os.getenv(ENV_LOCATION_ID, ""),
            key_ring_id=os.getenv(ENV_KEY_RING_ID, ""),
            key_id=os.getenv(ENV_KEY_ID, ""),
            key_version=int(os.getenv(ENV_KEY_VERSION) or 1),
            service_account_path=os.getenv(ENV_SERVICE_ACCOUNT_PATH),
        )
