"""Homecare route optimizer: geocode visits, request a route, publish the itinerary."""
