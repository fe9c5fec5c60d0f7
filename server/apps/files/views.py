"""API views for file custody operations."""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from server.apps.accounts.decorators import bearer_required
from server.apps.files.logic import file_operations


@csrf_exempt
@require_POST
@bearer_required
def upload(request: HttpRequest) -> JsonResponse:
    """Upload up to ``FILE_UPLOAD_MAX_COUNT`` files into a folder."""
    uploads = request.FILES.getlist('files')
    if len(uploads) > settings.FILE_UPLOAD_MAX_COUNT:
        raise ValidationError(
            f'At most {settings.FILE_UPLOAD_MAX_COUNT} files per upload',
        )

    result = file_operations.upload_files(
        request.identity,  # type: ignore[attr-defined]
        request.POST.get('folder'),
        uploads,
    )
    failed = [
        {'originalName': outcome.original_name, 'reason': outcome.error}
        for outcome in result.failed
    ]

    if not result.uploaded:
        return JsonResponse(
            {'message': 'Failed to upload any files', 'failed': failed},
            status=400 if result.all_rejected else 500,
        )

    return JsonResponse(
        {
            'message': (
                f'Successfully uploaded {len(result.uploaded)} file(s)'
            ),
            'files': [record.summary() for record in result.uploaded],
            'failed': failed,
        },
        status=201,
    )


@require_GET
@bearer_required
def file_list(request: HttpRequest) -> JsonResponse:
    """List the caller's files with optional filters and pagination."""
    page = file_operations.list_files(
        request.identity,  # type: ignore[attr-defined]
        folder=request.GET.get('folder'),
        file_type=request.GET.get('fileType'),
        page=request.GET.get('page'),
        limit=request.GET.get('limit'),
    )
    return JsonResponse({
        'files': [record.summary() for record in page.files],
        'pagination': page.pagination(),
    })


@csrf_exempt
@require_http_methods(['GET', 'DELETE'])
@bearer_required
def file_detail(request: HttpRequest, file_id: int) -> JsonResponse:
    """Show or delete one of the caller's files."""
    identity = request.identity  # type: ignore[attr-defined]

    if request.method == 'DELETE':
        filename = file_operations.delete_file(identity, file_id)
        return JsonResponse({
            'message': 'File deleted successfully',
            'filename': filename,
        })

    record = file_operations.get_file(identity, file_id)
    return JsonResponse({'file': record.summary()})


@require_GET
@bearer_required
def download(request: HttpRequest, file_id: int) -> JsonResponse:
    """Return a signed download URL for one of the caller's files."""
    link = file_operations.get_download_link(
        request.identity,  # type: ignore[attr-defined]
        file_id,
    )
    return JsonResponse({
        'url': link.url,
        'downloadUrl': link.url,
        'signedUrl': link.url,
        'filename': link.filename,
        'expiresIn': link.expires_in,
    })


@require_GET
@bearer_required
def folder_list(request: HttpRequest) -> JsonResponse:
    """List the caller's folders."""
    folders = file_operations.list_folders(
        request.identity,  # type: ignore[attr-defined]
    )
    return JsonResponse({'folders': folders})
