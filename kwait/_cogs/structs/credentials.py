"""
Credentials for reaching the cluster where the configurations live.

Only what a plain HTTPS client can use is supported: the server's address,
the TLS trust & client certificates, and the ``Authorization`` header
(basic auth, a bearer token, or any other scheme with its credentials).
Token refreshing and exec-plugins are out of scope: the test clusters
are expected to provide static credentials in their kubeconfigs.
"""
import dataclasses
from typing import Optional, Union

PemData = Union[str, bytes]  # either PEM text or its base64 encoding.


class LoginError(Exception):
    """ No usable credentials could be found for the cluster. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    server: str

    # Server verification.
    ca_path: Optional[str] = None
    ca_data: Optional[PemData] = None
    insecure: Optional[bool] = None

    # Client certificate authentication.
    certificate_path: Optional[str] = None
    certificate_data: Optional[PemData] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[PemData] = None

    # Header authentication.
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None
    token: Optional[str] = None

    # The namespace of the kubeconfig's current context, if set there.
    default_namespace: Optional[str] = None
