# utils/email.py
import logging
import os

import requests

logger = logging.getLogger(__name__)

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_email(to_email: str, subject: str, html: str):
     api_key = os.getenv("BREVO_API_KEY")
     if not api_key:
          raise Exception("BREVO_API_KEY is not set")

     response = requests.post(
          BREVO_URL,
          headers={
               "api-key": api_key,
               "Content-Type": "application/json",
          },
          json={
               "sender": {
                    "name": os.getenv("EMAIL_SENDER_NAME", "uHomes"),
                    "email": os.getenv("EMAIL_SENDER_ADDRESS", "noreply@u-homes.com"),
               },
               "to": [{"email": to_email}],
               "subject": subject,
               "htmlContent": html,
          },
          timeout=10,
     )
     if response.status_code not in (200, 201):
          raise Exception(f"Brevo error: {response.text}")
     logger.info("Sent '%s' email to %s", subject, to_email)


def send_verification_email(to_email: str, full_name: str, code: str, signed_token: str):
     frontend_url = os.getenv("FRONTEND_URL", "http://localhost:5173")
     verification_url = f"{frontend_url}/auth/verify?token={signed_token}"
     send_email(
          to_email,
          "Verify your uHomes email",
          f"""
               <h2>Welcome to uHomes, {full_name or 'there'}!</h2>
               <p>Your verification code is:</p>
               <h1 style="letter-spacing:8px;color:#3E78FF">{code}</h1>
               <p>This code expires in 12 minutes.</p>
               <p>Or verify instantly: <a href="{verification_url}">Verify Email Address</a></p>
          """,
     )


def send_password_reset_email(to_email: str, full_name: str, code: str):
     send_email(
          to_email,
          "Reset your uHomes password",
          f"""
               <h3>Password Reset Request</h3>
               <p>Hi {full_name or 'User'},</p>
               <p>Your OTP for password reset is:</p>
               <h2>{code}</h2>
               <p>This code will expire in 10 minutes.</p>
               <p>If you did not request this, please ignore this email.</p>
          """,
     )


def send_password_changed_email(to_email: str, full_name: str):
     send_email(
          to_email,
          "Password Reset Successful",
          f"""
               <h3>Password Reset Successful</h3>
               <p>Hi {full_name or 'User'},</p>
               <p>Your password has been successfully reset.</p>
               <p>If you did not perform this action, please contact support immediately.</p>
          """,
     )
