def request_params(request) -> dict:
    """Query string merged with the body; body values win."""
    params = request.query_params.dict()
    if isinstance(request.data, dict):
        params.update({k: request.data[k] for k in request.data.keys()})
    return params
