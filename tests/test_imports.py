# test_imports.py
import llm_meter


def test_package_imports():
    assert llm_meter.__version__ == "0.1.0"
    for name in llm_meter.__all__:
        assert hasattr(llm_meter, name), f"llm_meter is missing {name}"


def test_errors_share_base_class():
    from llm_meter import CostLimitExceeded, MeterError, TokenCapExceeded, UnknownModelError

    assert issubclass(CostLimitExceeded, MeterError)
    assert issubclass(TokenCapExceeded, MeterError)
    assert issubclass(UnknownModelError, MeterError)
