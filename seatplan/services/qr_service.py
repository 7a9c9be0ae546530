"""
QR code generation service
"""

import io
import qrcode

class QRService:
    """Service for generating the registration QR code"""

    @staticmethod
    def registration_url(base_url: str) -> str:
        """Get the URL that the QR code will point to"""
        return f"{base_url.rstrip('/')}/"

    @staticmethod
    def generate_registration_qr(base_url: str, format: str = 'PNG') -> bytes:
        """Generate QR code for the guest registration page"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.registration_url(base_url))
        qr.make(fit=True)

        # PIL image, needs Pillow
        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)
        return buffer.getvalue()
