import pytest

from kwait._cogs.clients.errors import APINotFoundError
from kwait._cogs.structs.bodies import Configuration
from kwait._core.actions import predicates
from kwait._core.actions.waiting import NotInDesiredStateError, WaitTimeoutError
from kwait._core.intents.configurations import ConfigurationsClient, ResourceNames
from kwait.cli import CLIControls, main

BODY = {
    'metadata': {'name': 'cfg1', 'namespace': 'ns1'},
    'spec': {'template': {'spec': {'containers': [{'image': 'old'}]}}},
}


@pytest.fixture()
def wait_mock(mocker):
    return mocker.patch('kwait._core.actions.waiting.wait_for_config_latest_revision',
                        return_value='cfg1-00002')


@pytest.fixture()
def check_mock(mocker):
    return mocker.patch('kwait._core.actions.waiting.check_configuration_state',
                        return_value=None)


@pytest.fixture()
def create_mock(mocker):
    return mocker.patch('kwait._core.intents.configurations.create_configuration',
                        return_value=Configuration.parse(BODY))


@pytest.fixture()
def patch_mock(mocker):
    return mocker.patch('kwait._core.intents.configurations.patch_config_image',
                        return_value=Configuration.parse(BODY))


@pytest.fixture()
def get_mock(mocker):
    return mocker.patch.object(ConfigurationsClient, 'get',
                               return_value=Configuration.parse(BODY))


def test_wait_prints_the_ready_revision(invoke, wait_mock, settings):
    result = invoke(['wait', 'cfg1', '--revision', 'cfg1-00001'])
    assert result.exit_code == 0, result.output
    assert result.output == 'cfg1-00002\n'
    assert wait_mock.call_count == 1

    client, names = wait_mock.call_args[0]
    assert isinstance(client, ConfigurationsClient)
    assert names == ResourceNames(config='cfg1', revision='cfg1-00001')
    assert wait_mock.call_args[1]['settings'].polling == settings.polling


def test_wait_with_polling_options(invoke, wait_mock, settings):
    result = invoke(['wait', 'cfg1', '--interval', '0.5', '--timeout', '30'])
    assert result.exit_code == 0, result.output

    used_settings = wait_mock.call_args[1]['settings']
    assert used_settings.polling.interval == 0.5
    assert used_settings.polling.timeout == 30
    assert settings.polling.interval == 1.0  # not modified in place.
    assert settings.polling.timeout == 600


def test_wait_with_polling_envvars(invoke, wait_mock):
    result = invoke(['wait', 'cfg1'], env={'KWAIT_WAIT_INTERVAL': '2', 'KWAIT_WAIT_TIMEOUT': '20'})
    assert result.exit_code == 0, result.output

    used_settings = wait_mock.call_args[1]['settings']
    assert used_settings.polling.interval == 2
    assert used_settings.polling.timeout == 20


@pytest.mark.parametrize('options, expected', [
    ([], 'default'),
    (['-n', 'ns1'], 'ns1'),
    (['--namespace', 'ns1'], 'ns1'),
])
def test_wait_in_namespaces(invoke, wait_mock, options, expected):
    result = invoke(['wait', 'cfg1'] + options)
    assert result.exit_code == 0, result.output

    client, _ = wait_mock.call_args[0]
    assert client.namespace == expected


def test_wait_failure_is_reported(invoke, wait_mock):
    wait_mock.side_effect = WaitTimeoutError('cfg1', description='ConfigurationReadyWithRevision',
                                             reason='timed out after 600s')
    result = invoke(['wait', 'cfg1'])
    assert result.exit_code == 1
    assert "Error: configuration 'cfg1' is not in desired state" in result.output
    assert "(ConfigurationReadyWithRevision)" in result.output


def test_check_passes(invoke, check_mock):
    result = invoke(['check', 'cfg1'])
    assert result.exit_code == 0, result.output
    assert check_mock.call_count == 1

    client, name, in_state = check_mock.call_args[0]
    assert isinstance(client, ConfigurationsClient)
    assert name == 'cfg1'
    assert in_state is predicates.configuration_has_created_revision


def test_check_failure_is_reported(invoke, check_mock):
    check_mock.side_effect = NotInDesiredStateError('cfg1')
    result = invoke(['check', 'cfg1'])
    assert result.exit_code == 1
    assert "Error: configuration 'cfg1' is not in desired state" in result.output


def test_create_with_labels(invoke, create_mock):
    result = invoke(['create', 'cfg1', 'helloworld', '-l', 'a=b', '--label', 'c=d=e'])
    assert result.exit_code == 0, result.output
    assert result.output == 'cfg1\n'
    assert create_mock.call_count == 1

    client, names, *options = create_mock.call_args[0]
    assert isinstance(client, ConfigurationsClient)
    assert names == ResourceNames(config='cfg1', image='helloworld')
    assert len(options) == 2

    body = {}
    for option in options:
        option(body)
    assert body == {'metadata': {'labels': {'a': 'b', 'c': 'd=e'}}}


def test_create_with_malformed_labels(invoke, create_mock):
    result = invoke(['create', 'cfg1', 'helloworld', '-l', 'abc'])
    assert result.exit_code == 2
    assert "Labels must be KEY=VALUE" in result.output
    assert not create_mock.called


def test_create_failure_is_reported(invoke, create_mock):
    create_mock.side_effect = APINotFoundError(404, message='no such resource')
    result = invoke(['create', 'cfg1', 'helloworld'])
    assert result.exit_code == 1
    assert "Error: HTTP 404: no such resource" in result.output


def test_patch_image(invoke, get_mock, patch_mock):
    result = invoke(['patch-image', 'cfg1', 'registry/image:v2'])
    assert result.exit_code == 0, result.output
    assert result.output == 'cfg1\n'
    assert get_mock.call_count == 1
    assert get_mock.call_args[0] == ('cfg1',)
    assert patch_mock.call_count == 1

    client, cfg, image_path = patch_mock.call_args[0]
    assert isinstance(client, ConfigurationsClient)
    assert cfg == Configuration.parse(BODY)
    assert image_path == 'registry/image:v2'


def test_login_failure_is_reported(runner, tmpdir, wait_mock):
    kubeconfig = tmpdir.join('config')
    kubeconfig.write('')
    result = runner.invoke(main, ['wait', 'cfg1', '--kubeconfig', str(kubeconfig)],
                           obj=CLIControls())
    assert result.exit_code == 1
    assert "Current context is not set" in result.output
    assert not wait_mock.called
