# hm_ipd/tests/helpers.py


def scoped(tenant_id):
    return {"HTTP_X_TENANT_ID": str(tenant_id)}


def data(response):
    """
    Unwraps the success envelope: {"success": true, "data": ...}.
    """
    assert response.data["success"] is True, response.data
    return response.data["data"]
