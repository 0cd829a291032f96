import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from orbbec import Context, Pipeline
from orbbec.sys import set_backend
from orbbec.sys.software import SoftwareBackend, SoftwareRuntime
from utils.config import Config as AppConfig


@pytest.fixture
def runtime():
    return SoftwareRuntime()


@pytest.fixture
def sw_device(runtime):
    return runtime.add_default_device(serial_number="SW0001")


@pytest.fixture
def backend(runtime, sw_device):
    be = SoftwareBackend(runtime)
    set_backend(be)
    yield be
    set_backend(None)


@pytest.fixture
def context(backend):
    ctx = Context()
    yield ctx
    ctx.close()


@pytest.fixture
def device(context):
    return context.query_device_list().get(0)


@pytest.fixture
def pipeline(device):
    pipe = Pipeline(device)
    yield pipe
    pipe.close()


@pytest.fixture(autouse=True)
def _reset_app_config():
    yield
    AppConfig.reset()
