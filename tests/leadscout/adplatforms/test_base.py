"""Tests for the ad creative variants and platform status record."""
import pytest

from leadscout.adplatforms.base import (
    AdCreative, AdPlatformStatus, AdTargeting, CarouselAd, ImageAd, TextAd, VideoAd,
)


class TestAdCreative:

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            AdCreative(id='x')

    def test_id_required(self):
        with pytest.raises(ValueError):
            TextAd(id='')

    def test_invalid_status(self):
        with pytest.raises(ValueError, match='invalid ad status'):
            TextAd(id='t1', status='deleted')

    @pytest.mark.parametrize('cls', [ImageAd, CarouselAd])
    def test_image_variants_need_image(self, cls):
        with pytest.raises(ValueError, match='image_url'):
            cls(id='a1')

    def test_video_needs_video_or_thumbnail(self):
        with pytest.raises(ValueError):
            VideoAd(id='v1')
        assert VideoAd(id='v2', thumbnail_url='https://cdn/x.jpg').type == 'video'

    def test_to_dict_drops_empty_fields(self):
        ad = ImageAd(id='fb-1', headline='Cool Tint', image_url='https://cdn/1.jpg',
                     targeting=AdTargeting(locations=['Miami, FL'], age_range='25-54'))
        data = ad.to_dict()
        assert data['type'] == 'image'
        assert data['imageUrl'] == 'https://cdn/1.jpg'
        assert data['targeting']['ageRange'] == '25-54'
        assert 'primaryText' not in data
        assert 'spend' not in data


class TestAdPlatformStatus:

    def test_no_ads_with_ads_rejected(self):
        with pytest.raises(ValueError):
            AdPlatformStatus('Google Ads', has_ads=False, last_checked='now', ad_count=2)
        with pytest.raises(ValueError):
            AdPlatformStatus('Google Ads', has_ads=False, last_checked='now',
                             ads=[TextAd(id='t1')])

    def test_to_dict(self):
        status = AdPlatformStatus('Google Ads', True, 'now', ad_count=1,
                                  ads=[TextAd(id='t1', headline='Call Now')], ad_spend='$600/mo',
                                  notes='Live data')
        data = status.to_dict()
        assert data == {
            'platform': 'Google Ads',
            'hasAds': True,
            'lastChecked': 'now',
            'adCount': 1,
            'ads': [{'id': 't1', 'headline': 'Call Now', 'status': 'active', 'type': 'text'}],
            'notes': 'Live data',
            'adSpend': '$600/mo',
        }

    def test_to_dict_omits_missing_spend(self):
        data = AdPlatformStatus('Nextdoor', False, 'now').to_dict()
        assert 'adSpend' not in data
        assert data['ads'] == []
