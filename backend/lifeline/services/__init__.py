"""
services — outbound provider clients.

    places  — Google Places nearby-hospital search
    sms     — SMS delivery (Twilio / simulation)
    chat    — Gemini text generation for the medical-advisor chat
"""
