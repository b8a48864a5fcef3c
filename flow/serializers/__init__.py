from flow.exceptions import ValidationFailed


def validated(serializer_class, data) -> dict:
    """Run ``serializer_class`` over ``data`` and return its validated data.

    Input errors are raised as :class:`ValidationFailed` so that stations
    see one error code for every malformed request.
    """
    s = serializer_class(data=data)
    if not s.is_valid():
        field, errors = next(iter(s.errors.items()))
        message = errors[0] if isinstance(errors, list) and errors else errors
        raise ValidationFailed(f"{field}: {message}")
    return s.validated_data
