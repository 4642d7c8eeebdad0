"""
Local emulation of the Carbon Calculator API.

Implements the endpoints the client consumes so the use cases can run
end to end without the real service:

    uvicorn carbon_calculator.sandbox.main:app --reload
"""
