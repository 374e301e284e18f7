import secrets
import string

from app.models.enums import VerificationMethodEnum


TOKEN_PREFIX = "verify-domain-"
TOKEN_LENGTH = 20
DNS_CHALLENGE_SUBDOMAIN = "_domainverify"
FILE_CHALLENGE_PATH = "/domain-verification.txt"

# URL-safe, case-sensitive, no padding. 64 symbols -> 6 bits each.
TOKEN_ALPHABET = string.ascii_letters + string.digits + "_-"


def validate_verification_method(method: str) -> VerificationMethodEnum:
    try:
        return VerificationMethodEnum(method)
    except ValueError as exc:
        raise ValueError(f"Unsupported verification method: {method}") from exc


def generate_verification_token(prefix: str = TOKEN_PREFIX, length: int = TOKEN_LENGTH) -> str:
    if length < TOKEN_LENGTH:
        raise ValueError(f"Token length must be at least {TOKEN_LENGTH}")
    body = "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))
    return f"{prefix}{body}"


def dns_record_name(domain: str, subdomain: str = DNS_CHALLENGE_SUBDOMAIN) -> str:
    return f"{subdomain}.{domain}"


def file_challenge_url(domain: str, path: str = FILE_CHALLENGE_PATH) -> str:
    return f"https://{domain}{path}"


def build_verification_instructions(
    domain: str,
    token: str,
    method: str,
    *,
    subdomain: str = DNS_CHALLENGE_SUBDOMAIN,
    path: str = FILE_CHALLENGE_PATH,
) -> dict:
    method = validate_verification_method(method)
    if method is VerificationMethodEnum.DNS:
        record_name = dns_record_name(domain, subdomain)
        return {
            "method": method.value,
            "recordType": "TXT",
            "recordName": record_name,
            "value": token,
            "text": f"Create a DNS TXT record for {record_name} with the value: {token}",
        }
    url = file_challenge_url(domain, path)
    return {
        "method": method.value,
        "fileUrl": url,
        "value": token,
        "text": f"Create a file at {url} with the contents: {token}",
    }
