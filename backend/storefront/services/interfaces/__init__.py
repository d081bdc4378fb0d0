"""Service interface contracts (ABCs)"""

from storefront.services.interfaces.payment_gateway import IPaymentGateway
from storefront.services.interfaces.email_sender import IEmailSender
from storefront.services.interfaces.image_storage import IImageStorage

__all__ = [
    'IPaymentGateway',
    'IEmailSender',
    'IImageStorage',
]
