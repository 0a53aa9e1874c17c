from __future__ import annotations

from scheduling_gateway.domain import ErrorCode, GatewayError, MissingParam, errors, http_status_for


def test_every_error_code_has_an_http_status():
    assert set(errors.HTTP_STATUS) == set(ErrorCode)
    assert http_status_for(ErrorCode.AMBIGUOUS) == 409
    assert http_status_for(ErrorCode.UNKNOWN_ROUTE) == 404
    assert http_status_for(ErrorCode.INTERNAL) == 500


def test_every_error_class_maps_to_its_code():
    classes = [cls for cls in vars(errors).values() if isinstance(cls, type) and issubclass(cls, GatewayError)]
    codes = {cls.code for cls in classes if cls is not GatewayError}
    assert codes == set(ErrorCode)


def test_missing_param_lists_names():
    error = MissingParam("phone", "client_id")
    assert error.message == "Missing param: phone, client_id"
    assert error.details == {"params": ["phone", "client_id"]}
