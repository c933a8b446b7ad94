# boto3 client factories and error translation

import logging
from contextlib import contextmanager

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

logger = logging.getLogger(__name__)

# STS is global; the key exchange only needs some endpoint
STS_DEFAULT_REGION = "us-east-1"

# Error codes that mean the credentials need to be entered again
EXPIRED_TOKEN_CODES = frozenset({
	"ExpiredTokenException",
	"ExpiredToken",
	"UnrecognizedClientException",
	"InvalidClientTokenId",
	"InvalidSignatureException",
	"RequestExpired",
})


class CwlogsError(Exception):
	"""Base exception for errors with user-friendly messages."""
	pass


class ConfigurationError(CwlogsError):
	"""Raised when credentials are missing or cannot be made valid."""
	pass


class NotFoundError(CwlogsError):
	"""Raised when a listing comes back empty."""
	pass


class ExpiredTokenError(CwlogsError):
	"""Raised when AWS rejects the credentials as expired or invalid."""
	pass


class UnexpectedError(CwlogsError):
	"""Raised for any other failure reported by AWS."""
	pass


def error_code(error: ClientError) -> str:
	return error.response.get("Error", {}).get("Code", "")


@contextmanager
def translate_errors(context: str):
	"""Turn botocore failures raised inside the block into CwlogsError subclasses."""
	try:
		yield
	except ClientError as e:
		code = error_code(e)
		if code in EXPIRED_TOKEN_CODES:
			logger.debug("AWS rejected credentials while %s (%s)", context, code)
			raise ExpiredTokenError(f"The security token is expired or invalid ({code}).") from e
		raise UnexpectedError(f"An error occurred while {context}: {e}") from e
	except NoCredentialsError as e:
		raise ConfigurationError(f"No AWS credentials available while {context}.") from e
	except BotoCoreError as e:
		raise UnexpectedError(f"An error occurred while {context}: {e}") from e


def _session_kwargs(credentials):
	kwargs = {
		"aws_access_key_id": credentials.access_key_id,
		"aws_secret_access_key": credentials.secret_access_key,
	}
	if credentials.session_token:
		kwargs["aws_session_token"] = credentials.session_token
	return kwargs


def get_logs_client(region, credentials):
	"""Create a CloudWatch Logs client bound to explicit credentials."""
	logger.debug("Creating CloudWatch Logs client for %s", region)
	return boto3.client("logs", region_name=region, **_session_kwargs(credentials))


def get_sts_client(credentials):
	"""Create an STS client from the long-lived key pair only."""
	return boto3.client(
		"sts",
		region_name=credentials.region or STS_DEFAULT_REGION,
		aws_access_key_id=credentials.access_key_id,
		aws_secret_access_key=credentials.secret_access_key,
	)
