"""
Connecting to the cluster: the HTTP session and the kubeconfig-based login.

The tests usually run against a disposable cluster with static credentials
in the kubeconfig, so nothing beyond reading the kubeconfig is supported:
no token refreshing, no exec-plugins, no in-cluster service accounts.
"""
import base64
import contextlib
import os
import ssl
import tempfile
from typing import Any, Dict, List, Optional

import aiohttp
import yaml

from kwait._cogs.helpers import versions
from kwait._cogs.structs import credentials


class APIContext:
    """
    An HTTP session to one cluster, with its credentials applied.

    It is created once per test run (or per test) and passed to the clients
    explicitly. It must be closed when not needed, preferably with::

        async with APIContext(info) as context:
            client = ConfigurationsClient(context=context, settings=settings)
    """

    session: aiohttp.ClientSession
    server: str
    default_namespace: Optional[str]

    def __init__(self, info: credentials.ConnectionInfo) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
            headers=make_headers(info),
            auth=(aiohttp.BasicAuth(info.username, info.password)
                  if info.username and info.password else None),
        )

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()


def make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    headers = {'User-Agent': f'kwait/{versions.version or "unknown"}'}
    scheme = info.scheme or ('Bearer' if info.token else None)
    authorization = ' '.join(part for part in [scheme, info.token] if part)
    if authorization:
        headers['Authorization'] = authorization
    return headers


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    context = ssl.create_default_context(
        cafile=info.ca_path,
        cadata=decode_to_pem(info.ca_data) if info.ca_data else None,
    )
    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    # The client certificates are loaded only from files; the files are removed after loading.
    with contextlib.ExitStack() as stack:
        certfile = info.certificate_path or _write_pem(stack, info.certificate_data)
        keyfile = info.private_key_path or _write_pem(stack, info.private_key_data)
        if certfile and keyfile:
            context.load_cert_chain(certfile=certfile, keyfile=keyfile)
    return context


def _write_pem(stack: contextlib.ExitStack, data: Optional[credentials.PemData]) -> Optional[str]:
    if not data:
        return None
    file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
    file.write(decode_to_pem(data).encode('ascii'))
    return file.name


def decode_to_pem(data: credentials.PemData) -> str:
    """ Kubeconfigs keep the certificates base64-encoded; the explicit ones are PEM already. """
    text = data.decode('ascii') if isinstance(data, bytes) else data
    return text if text.startswith('-----BEGIN ') else base64.b64decode(text).decode('ascii')


def find_kubeconfigs(path: Optional[str] = None) -> List[str]:
    """
    Resolve the kubeconfig files the same way as ``kubectl`` does.

    The path (explicit, or from ``$KUBECONFIG``) can list several files
    separated by ``os.pathsep``. If none is given, ``~/.kube/config`` is used.
    """
    listed = path or os.environ.get('KUBECONFIG') or ''
    paths = [os.path.expanduser(item.strip()) for item in listed.split(os.pathsep) if item.strip()]
    if not paths:
        default = os.path.expanduser('~/.kube/config')
        if not os.path.exists(default):
            raise credentials.LoginError("No kubeconfig is found: neither specified nor default.")
        paths = [default]
    return paths


def merge_kubeconfigs(paths: List[str]) -> Dict[str, Any]:
    """
    Merge the kubeconfigs into one: the first definition of every entry wins.

    The absent and unparseable files fail the login instead of being skipped.
    """
    merged: Dict[str, Any] = {'current-context': None, 'contexts': {}, 'clusters': {}, 'users': {}}
    for path in paths:
        with open(path, encoding='utf-8') as f:
            config = yaml.safe_load(f.read()) or {}
        merged['current-context'] = merged['current-context'] or config.get('current-context')
        for section, field in [('contexts', 'context'), ('clusters', 'cluster'), ('users', 'user')]:
            for entry in config.get(section) or []:
                merged[section].setdefault(entry['name'], entry.get(field) or {})
    return merged


def login_with_kubeconfig(path: Optional[str] = None) -> credentials.ConnectionInfo:
    """ Get the credentials of the kubeconfig's current context. """
    config = merge_kubeconfigs(find_kubeconfigs(path))
    if not config['current-context']:
        raise credentials.LoginError("Current context is not set in kubeconfigs.")
    try:
        context = config['contexts'][config['current-context']]
        cluster = config['clusters'][context['cluster']]
    except KeyError as e:
        raise credentials.LoginError(f"Kubeconfig refers to an undefined entry: {e}") from e
    user = config['users'].get(context.get('user'), {})

    # Tokens of the auth-providers are taken as is, even if expired: no refreshing.
    provider = user.get('auth-provider') or {}
    token = user.get('token') or (provider.get('config') or {}).get('access-token')

    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=token,
        default_namespace=context.get('namespace'),
    )
