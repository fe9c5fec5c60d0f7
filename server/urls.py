"""Main URL mapping configuration file.

Routes are mounted without trailing slashes: `/auth/login`, `/files`,
`/files/<id>/download` and so on. Unknown routes get a JSON 404.
"""

from django.urls import include, path

from server.apps.accounts import urls as accounts_urls
from server.apps.files import urls as files_urls

urlpatterns = [
    # Apps:
    path('auth/', include(accounts_urls, namespace='accounts')),
    path('', include(files_urls, namespace='files')),
]

handler404 = 'server.apps.core.views.not_found'
handler500 = 'server.apps.core.views.server_error'
