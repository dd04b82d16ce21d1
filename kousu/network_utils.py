"""
Network connectivity utilities.

MA-EYES is usually only reachable through a company VPN. A HEAD request to
the login page is sent before the browser starts so that an unreachable
server is reported with a hint instead of a navigation timeout.
"""

import socket
import ssl
import urllib.error
import urllib.request
from typing import Optional, Tuple

USER_AGENT = 'kousu/3.0'

# Lower-case fragments of preflight messages and Chromium net:: errors that
# mean the host could not be reached at all
UNREACHABLE_MARKERS = (
    'dns resolution failed',
    'connection refused',
    'connection timeout',
    'err_name_not_resolved',
    'err_connection_refused',
    'err_connection_timed_out',
    'err_address_unreachable',
    'err_internet_disconnected',
    'err_tunnel_connection_failed',
    'err_proxy_connection_failed',
)


def _ssl_context(ignore_https: bool) -> Optional[ssl.SSLContext]:
    if not ignore_https:
        return None
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _describe_reason(reason, timeout: int) -> str:
    if isinstance(reason, socket.timeout):
        return f"Connection timeout after {timeout}s"
    if isinstance(reason, socket.gaierror):
        return f"DNS resolution failed: {reason}"
    if isinstance(reason, ssl.SSLError):
        return f"SSL certificate error: {reason} (use --ignore-https to skip verification)"
    if isinstance(reason, ConnectionRefusedError):
        return f"Connection refused: {reason}"
    return f"Network error: {reason}"


def check_connectivity(url: str, timeout: int = 10, ignore_https: bool = False) -> Tuple[bool, str]:
    """
    Check that the MA-EYES login page answers.

    Args:
        url: URL of the login page
        timeout: Timeout in seconds (default: 10)
        ignore_https: Skip TLS certificate verification

    Returns:
        Tuple of (success, error message); the message is "" on success

    Examples:
        >>> success, error = check_connectivity("https://ma-eyes.example.com/maeyes/")
        >>> if not success:
        ...     print(f"Connection failed: {error}")
    """
    try:
        request = urllib.request.Request(url, method='HEAD')
    except ValueError as e:
        return (False, f"Invalid URL: {e}")
    request.add_header('User-Agent', USER_AGENT)

    try:
        with urllib.request.urlopen(request, timeout=timeout, context=_ssl_context(ignore_https)) as response:
            # Redirects to the login page are fine
            if 200 <= response.status < 400:
                return (True, "")
            return (False, f"HTTP {response.status}: {response.reason}")

    except urllib.error.HTTPError as e:
        # JSF login pages answer HEAD with 405 on some servers
        if e.code == 405:
            return (True, "")
        return (False, f"HTTP {e.code}: {e.reason}")

    except urllib.error.URLError as e:
        return (False, _describe_reason(e.reason, timeout))

    except OSError as e:
        # socket.timeout and ssl.SSLError raised while reading the response
        return (False, _describe_reason(e, timeout))


def is_vpn_proxy_error(error_message: str) -> bool:
    """
    Tell whether an error means that MA-EYES could not be reached.

    Examples:
        >>> is_vpn_proxy_error("DNS resolution failed")
        True
        >>> is_vpn_proxy_error("HTTP 500: Internal Server Error")
        False
    """
    error_lower = error_message.lower()
    return any(marker in error_lower for marker in UNREACHABLE_MARKERS)


def format_connectivity_error(url: str, error_message: str, is_vpn_issue: bool) -> str:
    """
    Format the message logged when MA-EYES cannot be reached.

    Args:
        url: URL of the login page
        error_message: Error from the preflight check or the browser
        is_vpn_issue: Whether the host could not be reached at all

    Returns:
        Multi-line message
    """
    lines = [
        "MA-EYES IS NOT REACHABLE",
        "",
        f"URL: {url}",
        f"Error: {error_message}",
        "",
    ]

    if is_vpn_issue:
        lines.append("MA-EYES is normally only reachable through the company VPN.")
        lines.append("Connect the VPN (and proxy, if any), check that the login page")
        lines.append("opens in a browser, then run the command again.")
    else:
        lines.append("Check --ma-url (KOUSU_MA_URL). Use --ignore-https for a self-signed")
        lines.append("certificate, or --skip-preflight if the server rejects HEAD requests.")

    return "\n".join(lines)
