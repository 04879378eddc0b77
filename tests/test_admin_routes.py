"""
Embedded admin routes under /app.

Authenticated with App Bridge session tokens; the stored ShopSession is
patched in by the shop_session fixture.
"""
import pytest

from models import QRCode, ShopSession
from services.shopify_admin import AdminClient, ShopifyAPIError
from factories import QRCodeRowFactory, TEST_SHOP, product_response

VALID_FORM = {
    'title': 'Summer hat promo',
    'product_id': 'gid://shopify/Product/1111',
    'product_handle': 'summer-hat',
    'product_variant_id': 'gid://shopify/ProductVariant/2222',
    'destination': 'product',
}


class TestAuthentication:

    def test_missing_token_returns_401(self, client):
        response = client.get('/app')
        assert response.status_code == 401

    def test_document_load_with_shop_redirects_to_install(self, client):
        response = client.get(f'/app?shop={TEST_SHOP}')
        assert response.status_code == 302
        assert f'/auth?shop={TEST_SHOP}' in response.headers['Location']

    def test_invalid_token_asks_app_bridge_to_retry(self, client, make_session_token, shop_session):
        token = make_session_token(secret='wrong-secret')
        response = client.get('/app', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert response.headers.get('X-Shopify-Retry-Invalid-Session-Request') == '1'

    def test_expired_token_rejected(self, client, make_session_token, shop_session):
        token = make_session_token(exp_offset=-600)
        response = client.get('/app', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_uninstalled_shop_asked_to_reauthorize(self, client, make_session_token, mocker):
        mocker.patch.object(ShopSession, 'get', return_value=None)
        token = make_session_token()
        response = client.get('/app', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert response.headers.get('X-Shopify-API-Request-Failure-Reauthorize') == '1'
        assert TEST_SHOP in response.headers.get('X-Shopify-API-Request-Failure-Reauthorize-Url')

    def test_id_token_query_param_accepted(self, client, make_session_token, shop_session, mocker):
        mocker.patch('routes.admin.get_qr_codes', return_value=[])
        response = client.get(f'/app?id_token={make_session_token()}')
        assert response.status_code == 200


class TestIndex:

    def test_lists_supplemented_qr_codes(self, client, auth_headers, mock_db, mocker):
        mock_db.execute.return_value.fetchall.return_value = [
            QRCodeRowFactory.build(id=2, destination='cart'),
            QRCodeRowFactory.build(id=1),
        ]
        mocker.patch.object(AdminClient, 'graphql', return_value=product_response())

        response = client.get('/app', headers=auth_headers)

        assert response.status_code == 200
        qr_codes = response.get_json()['qr_codes']
        assert [q['id'] for q in qr_codes] == [2, 1]
        assert qr_codes[0]['destination_url'] == f'https://{TEST_SHOP}/cart/2222:1'
        assert qr_codes[1]['product_title'] == 'Summer Hat'
        assert qr_codes[1]['image'].startswith('data:image/png;base64,')

    def test_empty_list(self, client, auth_headers, mocker):
        get_qr_codes = mocker.patch('routes.admin.get_qr_codes', return_value=[])

        response = client.get('/app', headers=auth_headers)

        assert response.get_json() == {'qr_codes': []}
        assert get_qr_codes.call_args[0][0] == TEST_SHOP

    def test_shopify_outage_returns_502(self, client, auth_headers, mocker):
        mocker.patch('routes.admin.get_qr_codes', side_effect=ShopifyAPIError('down'))
        response = client.get('/app', headers=auth_headers)
        assert response.status_code == 502


class TestEditQRCode:

    def test_new_returns_blank_form_state(self, client, auth_headers):
        response = client.get('/app/qrcodes/new', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json() == {'destination': 'product', 'title': ''}

    def test_existing_returns_supplemented_record(self, client, auth_headers, mocker):
        supplemented = {'id': 5, 'title': 'Promo', 'destination_url': 'https://x'}
        get_qr_code = mocker.patch('routes.admin.get_qr_code', return_value=supplemented)

        response = client.get('/app/qrcodes/5', headers=auth_headers)

        assert response.status_code == 200
        assert response.get_json() == supplemented
        args, kwargs = get_qr_code.call_args
        assert args[0] == 5
        assert kwargs['shop'] == TEST_SHOP

    def test_missing_returns_404(self, client, auth_headers, mocker):
        mocker.patch('routes.admin.get_qr_code', return_value=None)
        response = client.get('/app/qrcodes/5', headers=auth_headers)
        assert response.status_code == 404

    def test_non_numeric_id_returns_404(self, client, auth_headers):
        response = client.get('/app/qrcodes/abc', headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize('qr_id', ['1_0', '%207%20', '%EF%BC%97'])
    def test_loose_numeric_ids_return_404(self, client, auth_headers, mocker, qr_id):
        get_qr_code = mocker.patch('routes.admin.get_qr_code')
        response = client.get(f'/app/qrcodes/{qr_id}', headers=auth_headers)
        assert response.status_code == 404
        get_qr_code.assert_not_called()


class TestSaveQRCode:

    def test_create_redirects_to_new_record(self, client, auth_headers, mocker):
        create = mocker.patch('routes.admin.create_qr_code', return_value=QRCode(id=7))

        response = client.post('/app/qrcodes/new', data=VALID_FORM, headers=auth_headers)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/app/qrcodes/7')
        data = create.call_args[0][0]
        assert data['shop'] == TEST_SHOP
        assert data['title'] == 'Summer hat promo'

    def test_create_with_only_required_fields(self, client, auth_headers, mock_db):
        mock_db.execute.return_value.fetchone.return_value = QRCodeRowFactory.build(id=9)
        form = {'title': 'T', 'product_id': 'gid://shopify/Product/1', 'destination': 'cart'}

        response = client.post('/app/qrcodes/new', data=form, headers=auth_headers)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/app/qrcodes/9')
        params = mock_db.execute.call_args[0][1]
        assert params[-2:] == ('', '')

    def test_shop_always_comes_from_session(self, client, auth_headers, mocker):
        create = mocker.patch('routes.admin.create_qr_code', return_value=QRCode(id=7))
        form = {**VALID_FORM, 'shop': 'someone-else.myshopify.com'}

        client.post('/app/qrcodes/new', data=form, headers=auth_headers)

        assert create.call_args[0][0]['shop'] == TEST_SHOP

    def test_update_redirects_back(self, client, auth_headers, mocker):
        update = mocker.patch('routes.admin.update_qr_code', return_value=QRCode(id=3))

        response = client.post('/app/qrcodes/3', data=VALID_FORM, headers=auth_headers)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/app/qrcodes/3')
        args = update.call_args[0]
        assert args[0] == 3
        assert args[2] == TEST_SHOP

    def test_update_of_other_shops_record_returns_404(self, client, auth_headers, mocker):
        mocker.patch('routes.admin.update_qr_code', return_value=None)
        response = client.post('/app/qrcodes/3', data=VALID_FORM, headers=auth_headers)
        assert response.status_code == 404

    def test_invalid_form_returns_422_with_errors(self, client, auth_headers, mocker):
        create = mocker.patch('routes.admin.create_qr_code')

        response = client.post('/app/qrcodes/new', data={'title': ''}, headers=auth_headers)

        assert response.status_code == 422
        assert response.get_json()['errors'] == {
            'title': 'Title is required',
            'product_id': 'Product is required',
            'destination': 'Destination is required',
        }
        create.assert_not_called()

    def test_delete_redirects_to_index(self, client, auth_headers, mocker):
        delete = mocker.patch('routes.admin.delete_qr_code', return_value=True)

        response = client.post('/app/qrcodes/3', data={'action': 'delete'}, headers=auth_headers)

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/app')
        delete.assert_called_once_with(3, TEST_SHOP)

    def test_delete_skips_validation(self, client, auth_headers, mocker):
        mocker.patch('routes.admin.delete_qr_code', return_value=True)
        validate = mocker.patch('routes.admin.validate_qr_code')

        client.post('/app/qrcodes/3', data={'action': 'delete'}, headers=auth_headers)

        validate.assert_not_called()

    def test_delete_missing_returns_404(self, client, auth_headers, mocker):
        mocker.patch('routes.admin.delete_qr_code', return_value=False)
        response = client.post('/app/qrcodes/3', data={'action': 'delete'}, headers=auth_headers)
        assert response.status_code == 404

    def test_delete_new_returns_404(self, client, auth_headers, mocker):
        delete = mocker.patch('routes.admin.delete_qr_code')
        response = client.post('/app/qrcodes/new', data={'action': 'delete'}, headers=auth_headers)
        assert response.status_code == 404
        delete.assert_not_called()
